"""
Centralized constants for the text processing engine.
All tunable defaults live here; settings.py reads them as field defaults.
"""

# ===========================================
# SPLITTER
# ===========================================
SPLIT_MAX_CHUNK_SIZE = 1000           # characters per chunk
SPLIT_OVERLAP_SIZE = 50               # characters shared by adjacent chunks
SPLIT_LOOKBACK_WINDOW = 200           # how far back to search for a breakpoint
SPLIT_WORD_BOUNDARY_RANGE = 50        # look-back range for the whitespace fallback
SPLIT_MAX_INPUT_CHARS = 100_000       # hard input ceiling

PARAGRAPH_BREAK = "\n\n"
LINE_BREAK = "\n"

# Strongest first: paragraph, line, sentence end, clause, plain space
SPLIT_BREAKPOINTS = [
    PARAGRAPH_BREAK,
    LINE_BREAK,
    '。', '！', '？', '.', '!', '?',
    '；', ';', '，', ',',
    ' ',
]

# ===========================================
# BATCH PROCESSING
# ===========================================
BATCH_MAX_CONCURRENT = 5              # Pending + Processing batches allowed
BATCH_TIMEOUT_SECONDS = 300.0         # 5 minutes from start()
BATCH_CLEANUP_INTERVAL_SECONDS = 60.0
BATCH_MAX_AGE_SECONDS = 3600.0        # terminal batches kept for 1 hour
BATCH_SECONDS_PER_CHUNK_ESTIMATE = 3.0

# ===========================================
# LOGGING
# ===========================================
LOG_LEVEL = 'INFO'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE = 'logs/textproc.log'
LOG_MAX_SIZE_MB = 10
LOG_BACKUP_COUNT = 5
