APP_NAME = "Smart Ledger"
APP_WIDTH = 1100
APP_HEIGHT = 720
DB_FILE = "ledger.db"

SCHEMA_VERSION = 2
EXPORT_VERSION = 1

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"
DATETIME_FORMAT = "%Y-%m-%d %H:%M"
MONTH_FORMAT = "%Y-%m"

DEFAULT_MONTHLY_BUDGET = 10000
UNCLASSIFIED_CATEGORY = "未分類"
OTHER_BUCKET = "其他"
CURRENCY_SYMBOL = "NT$"

# Stored order matters: the first matching interval wins, so the all-day
# buckets stay at the end.
DEFAULT_CATEGORIES = [
    {"name": "早餐", "start": (5, 0),   "end": (10, 59), "color": "yellow"},
    {"name": "午餐", "start": (11, 0),  "end": (13, 59), "color": "orange"},
    {"name": "點心", "start": (14, 0),  "end": (16, 29), "color": "pink"},
    {"name": "晚餐", "start": (16, 30), "end": (20, 29), "color": "green"},
    {"name": "宵夜", "start": (20, 30), "end": (4, 59),  "color": "purple"},
    {"name": "交通", "start": (0, 0),   "end": (23, 59), "color": "blue"},
    {"name": "娛樂", "start": (0, 0),   "end": (23, 59), "color": "red"},
]

# Tiles offered on the entry form besides the time-based rules.
QUICK_CATEGORY_OPTIONS = [
    "早餐", "午餐", "晚餐", "宵夜",
    "飲品", "購物", "點心",
    "交通", "娛樂", "日用品",
    "禮物", "洗衣服", "藥物",
]

# ── AI query ─────────────────────────────────────────────────────────────────
GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
GEMINI_DEFAULT_MODEL = "gemini-2.5-flash"
AI_TIMEOUT_SECONDS = 30.0
AI_MAX_PROMPT_RECORDS = 50
GENERATION_CONFIG = {
    "temperature": 0.7,
    "maxOutputTokens": 2048,
    "topP": 0.9,
    "topK": 40,
}

EXAMPLE_QUESTIONS = [
    "How much did I spend on drinks this month?",
    "What did dinners cost me last week?",
    "Which day did I spend the most?",
    "Summarize this month's transport costs.",
    "Analyze my spending habits.",
]

STATUS_COLORS = {
    "ok":      "#4CAF50",
    "warning": "#FF9800",
    "error":   "#F44336",
    "info":    "#2196F3",
}
