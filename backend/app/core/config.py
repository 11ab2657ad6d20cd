# backend/app/core/config.py
# 환경변수 기반 설정 (기본값 포함)
import os


def _csv(name: str, default: str):
    raw = os.environ.get(name, default)
    return [s.strip() for s in raw.split(",") if s.strip()]


XT_API_BASE = os.environ.get("XT_API_BASE", "https://sapi.xt.com")
XT_ACCESS_KEY = os.environ.get("XT_ACCESS_KEY", "")
XT_SECRET_KEY = os.environ.get("XT_SECRET_KEY", "")
XT_RECV_WINDOW = int(os.environ.get("XT_RECV_WINDOW", "5000"))
XT_TIMEOUT = float(os.environ.get("XT_TIMEOUT", "10"))

# 대시보드에서 다루는 거래쌍 / 잔고 통화
PAIRS = _csv("ORDERDESK_PAIRS", "deuro_usdt,deuro_btc,deps_usdt,deps_btc")
CURRENCIES = _csv("ORDERDESK_CURRENCIES", "DEURO,DEPS,USDT,BTC")

DEPTH_LIMIT = int(os.environ.get("ORDERDESK_DEPTH_LIMIT", "50"))
