"""
Constants for File2Knowledge Desk.
"""

APP_TITLE = "File2Knowledge Desk"


# ----- Vector Resources -----

# Product limit on files linked per resource.
MAX_RESOURCE_FILES = 5

VECTOR_STORE_NAME = "Helper for wrapper Assistant"
FILE_PURPOSE = "user_data"

# Primary request instructions, filled from the selected resource.
SYSTEM_PROMPT_TEMPLATE = (
    "You are an assistant for developers using {description}. "
    "Answer from the documentation attached through file search and cite it "
    "when relevant. If the documentation does not cover a question, say so."
)
SYSTEM_PROMPT_SOURCES = " The project sources are at {github}."


# ----- Chat Naming -----

NEW_CHAT_TITLE = "New chat ..."
NAMING_INSTRUCTION = (
    "For each prompt and answer provided, generate in ≤6 words the main idea "
    "of the “QR” (question-answer)."
)


# ----- OpenAI -----

OPENAI_API_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4.1-mini"
DEFAULT_TIMEOUT_SECONDS = 120.0


# ----- Persistence -----

DEFAULT_DATA_DIRNAME = ".file2knowledge"
RESOURCES_FILENAME = "VectorResources.json"
CHAT_SESSIONS_FILENAME = "ChatSessions.json"
RESPONSE_LOG_FILENAME = "LogIds.txt"
