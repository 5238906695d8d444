import os

# 测试统一使用内存数据库，必须在导入 db_manager 之前设置
os.environ["DATABASE_URL"] = "sqlite://"
