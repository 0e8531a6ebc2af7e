TEMP_PATH = "./assets/temp"
GRAPH_PATH = "./assets/graph"
RESULT_PATH = "./assets/result"
LOG_PATH = "./assets/log"

# vertex and edge attribute read by the dissimilarity agents
DEFAULT_ATTRIBUTE: str = "label"

# sBMF restarts
DEFAULT_N_SHUFFLES: int = 5

# HGED blend
DEFAULT_ALPHA: float = 0.5
DEFAULT_BETA: float = 0.5
DEFAULT_GAMMA: float = 0.5

LOGGING_LEVEL: str = "INFO"
