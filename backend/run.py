from outfit_feed import create_app
from outfit_feed.shared.logging_config import setup_logging
from outfit_feed.shared.settings import Settings

# 先初始化日志系统，再组装应用，保证 worker 线程的日志有处理器
setup_logging()

settings = Settings.from_env()
app = create_app(settings)


if __name__ == '__main__':
    # 关闭 reloader，避免子进程重复启动 worker 与定时扫描
    app.run(debug=False, port=settings.port, use_reloader=False)
