import os

from dotenv import load_dotenv

load_dotenv()

# Paths
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# Market Settings
MARKET_TIMEZONE = os.getenv("MARKET_TIMEZONE", "Asia/Jakarta")
TICKER_SUFFIX = os.getenv("TICKER_SUFFIX", ".JK")
HISTORY_PERIOD = os.getenv("HISTORY_PERIOD", "1y")  # ~250 bars for 52-week range + EMA200
INTRADAY_LOOKBACK_DAYS = int(os.getenv("INTRADAY_LOOKBACK_DAYS", "60"))
INTRADAY_RECENT_DAYS = 5  # "5m" proxy = daily bars of the last 5 calendar days
INTRADAY_FALLBACK_BARS = 10

# Session clock (WIB)
MARKET_OPEN_MINUTES = 9 * 60           # 09:00
MARKET_CLOSE_MINUTES = 15 * 60 + 50    # 15:50
BREAK_MON_THU = (12 * 60, 13 * 60 + 30)  # 12:00 - 13:30
BREAK_FRIDAY = (11 * 60 + 30, 14 * 60)   # 11:30 - 14:00
MARKET_STATUS_SYMBOLS = ['^JKSE', 'BBCA.JK']

# Indicator Settings
RSI_PERIOD = 14
RSI_OVERSOLD = 30
RSI_OVERBOUGHT = 70
EMA_LONG_PERIOD = 200
EMA_MID_PERIOD = 50
MIN_SWING_BARS = 200
WEEK52_BARS = 250
VOLUME_AVG_WINDOW = 20
BANDAR_FLOW_WINDOW = 20
PATTERN_LOOKBACK = 5

# Batch Scanner
SCAN_CONCURRENCY = int(os.getenv("SCAN_CONCURRENCY", "5"))

# API / Logging
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Dashboard Settings
PAGE_TITLE = "IDX Stock Signal"
DEFAULT_TICKERS = [
    'BBCA.JK', 'TLKM.JK', 'BMRI.JK', 'ADRO.JK', 'ASII.JK', 'GOTO.JK',
    'UNVR.JK', 'ICBP.JK', 'BBNI.JK', 'PGAS.JK', 'BBRI.JK', 'INDF.JK',
    'KLBF.JK', 'SMGR.JK', 'EXCL.JK', 'ANTM.JK', 'CPIN.JK', 'INCO.JK',
    'MEDC.JK', 'PTBA.JK', 'BULL.JK', 'BUMI.JK', 'BELL.JK', 'TOBA.JK',
]
