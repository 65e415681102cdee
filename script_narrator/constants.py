"""All magic numbers and configuration constants."""

API_KEY_ENV = "GEMINI_API_KEY"                    # provider credential
TTS_MODEL = "gemini-2.5-flash-preview-tts"        # speech synthesis model
ANALYSIS_MODEL = "gemini-2.5-flash"               # voice sample analysis model
PCM_SAMPLE_RATE = 24000             # Hz, fixed by the TTS provider
PCM_CHANNELS = 1                    # mono
PCM_BITS_PER_SAMPLE = 16            # signed little-endian
WAV_HEADER_SIZE = 44                # bytes
DEFAULT_VOICE = "Puck"              # voice given to newly seen speakers
DEFAULT_SPEED = 1.0
DEFAULT_PITCH = 0
DEFAULT_VOLUME = 1.0
SPEED_RANGE = (0.5, 2.0)            # playback-rate multiplier
PITCH_RANGE = (-5, 5)               # accepted, never applied to playback
VOLUME_RANGE = (0.0, 1.0)           # linear gain
BACKGROUND_VOLUME = 0.3             # looping background track level
VOICE_PREVIEW_TEMPLATE = "Hello, I am {speaker}."
ANALYSIS_PROMPT = (
    "Analyze this voice sample. Describe the gender, tone (e.g., cheerful, serious), "
    "pitch, and suggested speaking style in one short sentence."
)
ANALYSIS_EMPTY_RESULT = "Voice analysis failed."
ANALYSIS_FALLBACK = "Could not analyze voice sample."
OUTPUT_DIR = "output"
VERSION = "0.1.0"
