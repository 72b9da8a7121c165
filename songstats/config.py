import os

from dotenv import load_dotenv

load_dotenv()

DATA_PATH = os.getenv("SONGSTATS_DATA_PATH", "data/spotify-2023.csv")
DATA_ENCODING = os.getenv("SONGSTATS_DATA_ENCODING", "latin-1")

N_BINS = int(os.getenv("SONGSTATS_N_BINS", 20))
TOP_K = int(os.getenv("SONGSTATS_TOP_K", 50))
QUANTILE = float(os.getenv("SONGSTATS_QUANTILE", 0.5))
