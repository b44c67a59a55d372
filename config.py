# config.py
import os, json
from pathlib import Path


def _env_bool(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip().lower() in ("1", "true", "yes", "on")


class Config:
    DEBUG = _env_bool("FLASK_DEBUG")
    TESTING = False

    # "memory" for local dev, "firestore" in production
    PROGRESS_STORE = os.getenv("PROGRESS_STORE", "memory")
    # Optional JSON file overriding the bundled game content
    GAME_CATALOG_PATH = os.getenv("GAME_CATALOG_PATH")

    TIME_ATTACK_LIMIT_SECONDS = float(os.getenv("TIME_ATTACK_LIMIT_SECONDS", "90"))
    QUESTIONS_PER_GAME = int(os.getenv("QUESTIONS_PER_GAME", "10"))
    DECISIONS_PER_GAME = int(os.getenv("DECISIONS_PER_GAME", "5"))

    FINNHUB_API_KEY = os.getenv("FINNHUB_API_KEY")
    FINNHUB_BASE_URL = os.getenv("FINNHUB_BASE_URL", "https://finnhub.io/api/v1")
    MARKET_DATA_TIMEOUT = float(os.getenv("MARKET_DATA_TIMEOUT", "10"))

    # Never enable outside local dev: trusts the X-Debug-Uid header
    AUTH_DISABLED = _env_bool("AUTH_DISABLED")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    @staticmethod
    def _resolve_firebase_cred_path() -> str | None:
        """
        Tries multiple ways to get a valid credential:
          1) FIREBASE_SERVICE_ACCOUNT_JSON (env contains the full JSON blob)
          2) GOOGLE_APPLICATION_CREDENTIALS (absolute or relative file path)
             - If relative or not found, try <repo>/firebase/credentials/<basename>
          3) First *.json found under <repo>/firebase/credentials
        Returns a string path if a file exists, or None if using JSON blob.
        Raises on total failure.
        """
        json_blob = os.getenv("FIREBASE_SERVICE_ACCOUNT_JSON")
        if json_blob:
            try:
                json.loads(json_blob)  # validate it's JSON
                return None
            except ValueError as e:
                raise RuntimeError(f"Invalid FIREBASE_SERVICE_ACCOUNT_JSON: {e}") from e

        p = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
        repo_root = Path(__file__).resolve().parent
        if p:
            p = p.strip().strip('"').strip("'")
            p = os.path.expanduser(os.path.expandvars(p))
            path = Path(p)

            if path.exists():
                return str(path)

            fallback = repo_root / "firebase" / "credentials" / path.name
            if fallback.exists():
                return str(fallback)

            rel_try = (repo_root / p).resolve()
            if rel_try.exists():
                return str(rel_try)

            raise FileNotFoundError(
                "Firebase credential file not found. Tried:\n"
                f" - {path}\n - {fallback}\n - {rel_try}\n"
                "Set FIREBASE_SERVICE_ACCOUNT_JSON or GOOGLE_APPLICATION_CREDENTIALS."
            )

        cred_dir = repo_root / "firebase" / "credentials"
        if cred_dir.exists():
            matches = sorted(cred_dir.glob("*.json"))
            if matches:
                return str(matches[0])

        raise FileNotFoundError(
            "No Firebase credentials found. Provide FIREBASE_SERVICE_ACCOUNT_JSON, "
            "or set GOOGLE_APPLICATION_CREDENTIALS, or put a JSON in firebase/credentials/."
        )

    @classmethod
    def validate_firebase_config(cls):
        # Will raise with a helpful message if nothing valid is found
        _ = cls._resolve_firebase_cred_path()


class TestConfig(Config):
    TESTING = True
    PROGRESS_STORE = "memory"
    GAME_CATALOG_PATH = None
    AUTH_DISABLED = False
    TIME_ATTACK_LIMIT_SECONDS = 90.0
