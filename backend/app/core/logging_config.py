import logging
from logging.handlers import RotatingFileHandler
import os

LOG_DIR = os.environ.get("BACKEND_LOG_DIR", "/var/log/xt-orderdesk")
LOG_FILE = os.path.join(LOG_DIR, "orderdesk.log")
LOG_LEVEL = os.environ.get("BACKEND_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

def setup_logging():
    os.makedirs(LOG_DIR, exist_ok=True)
    root = logging.getLogger()
    root.setLevel(LOG_LEVEL)
    # uvicorn --reload / 테스트에서 재호출돼도 핸들러는 한 번만
    if any(isinstance(h, RotatingFileHandler) for h in root.handlers):
        return
    formatter = logging.Formatter(LOG_FORMAT)
    file_handler = RotatingFileHandler(LOG_FILE, maxBytes=10*1024*1024, backupCount=5, encoding="utf-8")
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)
    # stdout도 출력(도커 로그 수집용)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)
    # 거래소 호출마다 찍히는 커넥션 로그는 생략
    logging.getLogger("urllib3").setLevel(logging.WARNING)
