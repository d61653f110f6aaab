import math

SCHEMA_VERSION = 1

NODE_DEFAULT_WIDTH = 280.0
NODE_DEFAULT_HEIGHT = 160.0
NODE_STACK_OFFSET = 20.0
NODE_CORNER_RADIUS = 12.0
NODE_PADDING = 16.0
NODE_BUTTON_HEIGHT = 26.0
NODE_BUTTON_SPACING = 8.0
NODE_THUMBNAIL_WIDTH = 64.0
NODE_THUMBNAIL_HEIGHT = 40.0

MIN_ZOOM = 0.25
MAX_ZOOM = 2.0
DEFAULT_ZOOM = 1.0
ZOOM_STEP = 0.25

AUTOSAVE_DELAY_MS = 1000

CURVE_OFFSET_FACTOR = 0.4
CURVE_OFFSET_MAX = 100.0
ARROW_LENGTH = 12.0
ARROW_HALF_ANGLE = math.pi / 6
CONNECTION_LINE_WIDTH = 3
CONNECTION_HIT_TOLERANCE = 6.0
CURVE_HIT_SAMPLES = 24

GRID_SPACING = 20.0
GRID_DOT_RADIUS = 1.0

PRIMARY_COLOR = "#6366F1"
PRIMARY_DARK_COLOR = "#4F46E5"
SUCCESS_COLOR = "#22C55E"
ERROR_COLOR = "#EF4444"
CANVAS_BACKGROUND_COLOR = "#F8FAFC"
GRID_DOT_COLOR = "#CBD5E1"
NODE_BACKGROUND_COLOR = "#FFFFFF"
NODE_BORDER_COLOR = "#E2E8F0"
NODE_SURFACE_COLOR = "#F1F5F9"
TEXT_PRIMARY_COLOR = "#0F172A"
TEXT_SECONDARY_COLOR = "#64748B"

COMPLETE_PERCENTAGE = 100.0

THUMBNAIL_FETCH_TIMEOUT_SECONDS = 10
THUMBNAIL_USER_AGENT = "Roadmapper-Thumbnails"
