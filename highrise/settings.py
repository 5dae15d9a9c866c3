# settings.py — single source of truth for all simulation constants

# --- Frame loop ---
FPS = 60

# --- Simulation Speed ---
SPEED_STEPS = [0, 1, 2, 4]  # 0 = paused

# --- Building geometry ---
FLOOR_HEIGHT = 3.5           # world units per floor
DEFAULT_FLOOR = 1            # used for placement when a roster entry has no floor
ZONE_JITTER = 2.5            # spread of agents inside a zone

# Division zones in a 4x2 grid (x, z) on every floor
DIVISION_ZONES = {
    "marketing":  (-8.75, -3.25),
    "research":   (-2.75, -3.25),
    "testing":    ( 3.25, -3.25),
    "production": ( 9.25, -3.25),
    "security":   (-8.75,  3.75),
    "legal":      (-2.75,  3.75),
    "accounting": ( 3.25,  3.75),
    "meeting":    ( 9.25,  3.75),
}

DIVISIONS = [
    "marketing", "research", "testing", "production",
    "security", "legal", "accounting",
]
VIRTUAL_DIVISIONS = ["management", "meeting"]

# --- Agent behaviour ---
AGENT_MOVE_SPEED = 1.5       # world units per second
ARRIVAL_EPSILON = 0.01

INITIAL_STATES = ["working", "idle"]

# Seconds spent in each state before the next transition is drawn
STATE_TIMINGS = {
    "working":    (10.0, 30.0),
    "idle":       (5.0, 10.0),
    "meeting":    (8.0, 20.0),
    "networking": (6.0, 15.0),
    "moving":     (0.0, 0.0),   # travel-time based
}

# Relative weights for the next state, keyed by the current state
TRANSITION_WEIGHTS = {
    "working":    {"working": 0.10, "moving": 0.35, "idle": 0.30, "meeting": 0.15, "networking": 0.10},
    "idle":       {"working": 0.45, "moving": 0.20, "idle": 0.05, "meeting": 0.15, "networking": 0.15},
    "meeting":    {"working": 0.40, "moving": 0.25, "idle": 0.20, "meeting": 0.05, "networking": 0.10},
    "networking": {"working": 0.35, "moving": 0.25, "idle": 0.20, "meeting": 0.10, "networking": 0.10},
    "moving":     {"working": 0.40, "moving": 0.00, "idle": 0.30, "meeting": 0.15, "networking": 0.15},
}
FALLBACK_STATE = "idle"

# Project agents carry a phase instead of a floor
PHASE_FLOOR_MAP = {4: 15, 5: 15, 6: 14, 7: 13, 8: 12, 9: 11, 10: 10}

# --- Task routing ---
DIVISION_KEYWORDS = {
    "marketing":  ["brand", "social", "content", "outreach", "campaign", "launch", "pr"],
    "research":   ["research", "prototype", "experiment", "design", "architecture", "innovation", "explore"],
    "testing":    ["test", "qa", "verify", "validate", "audit", "review", "check", "debug"],
    "production": ["build", "deploy", "ship", "implement", "code", "develop", "feature", "fix"],
    "security":   ["security", "vulnerability", "threat", "encrypt", "auth", "pentest", "firewall"],
    "legal":      ["legal", "compliance", "license", "patent", "copyright", "terms", "contract"],
    "accounting": ["budget", "invoice", "expense", "revenue", "financial", "receipt", "cost"],
}
DEFAULT_DIVISION = "production"
MAX_TASK_DIVISIONS = 3

COMPLEX_KEYWORDS = [
    "overhaul", "migrate", "rewrite", "redesign",
    "full-stack", "enterprise", "critical", "urgent",
]
SWARM_KEYWORDS = [
    "all hands", "swarm", "team effort",
    "cross-division", "company-wide", "everyone",
]
PRIORITY_CRITICAL = "critical"
PRIORITY_HIGH = "high"
DEFAULT_PRIORITY = "normal"
DEFAULT_TASK_SOURCE = "c2"

# Enterprise floors that lend specialists to a swarm
SPECIALTY_FLOORS = {
    "security":   19,
    "legal":      18,
    "research":   17,
    "accounting": 16,
}
REINFORCEMENTS_PER_FLOOR = 2

# --- Progress simulation (milliseconds) ---
PROGRESS_STEPS = 10
SINGLE_TASK_MS = 5000
SINGLE_TASK_JITTER_MS = 5000
MULTI_TASK_MS_PER_DIVISION = 5000
MULTI_TASK_JITTER_MS = 10000
SWARM_TASK_MS = 30000        # always above the longest multi delegation
SWARM_TASK_JITTER_MS = 20000

# --- Task log ---
MAX_TASK_LOG = 500
MAX_TASK_MESSAGES = 50
