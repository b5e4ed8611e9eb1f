"""Central configuration for pixel buffer processing.

All tunable parameters are defined here with descriptive names.
Engine modules import these values as defaults; callers can still pass
explicit arguments to override them per call.
"""

# =============================================================================
# BUFFER LAYOUT
# =============================================================================

# Number of bits packed into one byte of a 1-bit monochrome image
BITS_PER_BYTE = 8

# Bytes per pixel of a 24-bit color pixel
PIXEL_DEPTH_RGB = 3

# Row alignment (bytes) used when building buffers from decoded images.
# Matches the DWORD alignment of device-independent bitmaps.
STRIDE_ALIGNMENT = 4

# Number of intensity levels in an 8-bit histogram
HISTOGRAM_SIZE = 256

# =============================================================================
# THRESHOLDING
# =============================================================================

# Mid-point threshold for black/white and binary conversion (0-255)
BLACK_AND_WHITE_THRESHOLD = 0x80

# Default zone grid for localized (zoned) thresholding
DEFAULT_HORIZONTAL_ZONES = 3
DEFAULT_VERTICAL_ZONES = 3

# Number of nearest zones blended per pixel by Chow & Kaneko thresholding
CHOW_KANEKO_NEAREST_ZONES = 4

# =============================================================================
# CONTRAST
# =============================================================================

# Unused share of the intensity range above which enhance() prefers a
# linear stretch over histogram equalization.
# headroom = (min + (255 - max)) / 255
ENHANCE_HEADROOM_THRESHOLD = 0.2

# Default destination range for contrast stretching
STRETCH_MIN = 0
STRETCH_MAX = 255

# =============================================================================
# COLOR
# =============================================================================

# Sepia weights per output channel (red, green, blue rows; R, G, B columns)
SEPIA_WEIGHTS = (
    (0.393, 0.769, 0.189),
    (0.349, 0.686, 0.168),
    (0.272, 0.534, 0.131),
)

# =============================================================================
# CLI / BATCH
# =============================================================================

# File extensions picked up by the batch command
BATCH_EXTENSIONS = (".bmp", ".png", ".jpg", ".jpeg", ".tif", ".tiff")
