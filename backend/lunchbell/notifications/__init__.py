# backend/lunchbell/notifications/__init__.py

"""
通知レイヤ用モジュール群。

構成イメージ:
- config: Twilio Notify / Slack の設定値
- schemas: 通知メッセージとディスパッチ結果のスキーマ
- client: Twilio Notify / Slack への HTTP クライアントと binding クライアント
- service: チャンネル別 Sender と全購読者へのファンアウト
- factory: アプリ全体で共有する binding クライアント・Dispatcher の生成
- router: /lunch エンドポイント
"""
