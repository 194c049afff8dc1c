"""日志配置：应用创建时调用一次 setup_logging"""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # SQL 语句日志由 engine echo 控制
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
