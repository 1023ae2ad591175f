
from dotenv import load_dotenv

# Load .env before anything reads settings from os.environ
# (see geopost.config). Variables already set in the environment win.
load_dotenv()
