# --- Conversation states for /add ---
ASKING_TYPE = 0
ASKING_AMOUNT = 1
ASKING_CATEGORY = 2
ASKING_DESCRIPTION = 3
ASKING_CONFIRMATION = 4
