# backend/lunchbell/subscribers/__init__.py

"""
購読者レジストリ用モジュール群。

- schemas: チャンネル種別とレジストリのスナップショット型
- store: スナップショットの JSON ファイル永続化
- service: identity → binding の登録・解除を担う SubscriberRegistry
- config: スナップショット保存先の設定
"""
