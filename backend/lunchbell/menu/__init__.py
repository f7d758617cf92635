# backend/lunchbell/menu/__init__.py

"""
今日のメニュー取得とレディネス管理。

- config: メニュー取得元と更新スケジュールの設定
- client: メニュー取得元への HTTP クライアント
- service: 最新の取得結果を保持する MenuGate
- scheduler: 平日定時の更新タイミング計算と更新ループ
- router: /menu エンドポイント
"""
