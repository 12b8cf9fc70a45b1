# config.py

import os
import json
from azure.identity import DefaultAzureCredential
from azure.keyvault.secrets import SecretClient
from dotenv import load_dotenv
from core.security import redact_log, mask_phi
from logger import logger

load_dotenv()

# === Defaults for empirically chosen constants (overridable per deployment) ===
DEFAULT_SEVERITY_MULTIPLIERS = {
    "minor": 1.5,
    "moderate": 2.5,
    "severe": 3.5,
    "catastrophic": 5.0,
}

DEFAULT_LIABILITY_MULTIPLIERS = {
    "weak": 1.5,
    "moderate": 2.5,
    "strong": 3.0,
    "clear": 3.5,
}


# === Exception for Missing Required Configs ===
class ConfigError(Exception):
    pass


# === Azure Key Vault Setup (lazy initialization) ===
_keyvault_client = None


def get_from_secret_manager(var_name: str) -> str:
    """
    Attempts to retrieve a secret from Azure Key Vault.
    Returns None if Key Vault is not available or the secret is not found.
    """
    global _keyvault_client
    vault_url = os.getenv("AZURE_KEYVAULT_URL")
    if not vault_url:
        return None

    try:
        if not _keyvault_client:
            credential = DefaultAzureCredential()
            _keyvault_client = SecretClient(vault_url=vault_url, credential=credential)

        # Key Vault secret names cannot contain underscores
        secret = _keyvault_client.get_secret(var_name.replace("_", "-"))
        return secret.value
    except Exception as e:
        logger.warning(redact_log(mask_phi(f"⚠️ Key Vault lookup failed for {var_name}: {e}")))
        return None


def get_env(var_name: str, required: bool = True, default: str = None) -> str:
    """
    Retrieves configuration value in the following order:
    1. Azure Key Vault (if ENV=production or AZURE_KEYVAULT_URL is set)
    2. Environment variable or .env file
    3. Default
    """
    value = None

    if os.getenv("ENV", "").lower() == "production" or os.getenv("AZURE_KEYVAULT_URL"):
        value = get_from_secret_manager(var_name)

    if value is None:
        value = os.getenv(var_name, default)

    if required and not value:
        logger.error(f"❌ Missing required environment variable: {var_name}")
        raise ConfigError(f"Missing required environment variable: {var_name}")

    return value


def get_float(var_name: str, default: float) -> float:
    raw = get_env(var_name, required=False, default=None)
    if raw in (None, ""):
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{var_name} must be numeric, got {raw!r}") from e


def get_int(var_name: str, default: int) -> int:
    return int(get_float(var_name, default))


def get_multipliers(var_name: str, defaults: dict) -> dict:
    """
    Multiplier tables may be overridden with a JSON object in the environment,
    e.g. SEVERITY_MULTIPLIERS='{"minor": 1.25}'. Unlisted keys keep defaults.
    """
    raw = get_env(var_name, required=False, default=None)
    merged = dict(defaults)
    if not raw:
        return merged
    try:
        overrides = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(f"{var_name} must be a JSON object: {e}") from e
    if not isinstance(overrides, dict):
        raise ConfigError(f"{var_name} must be a JSON object")
    merged.update({str(k): float(v) for k, v in overrides.items()})
    return merged


# === Centralized Configuration Loader ===
class AppConfig:
    def __init__(self):
        # === OpenAI (drafting collaborator) ===
        self.OPENAI_API_KEY = get_env("OPENAI_API_KEY", required=False)
        self.OPENAI_MODEL = get_env("OPENAI_MODEL", required=False, default="gpt-4o")
        self.DRAFTING_TIMEOUT_SECONDS = get_float("DRAFTING_TIMEOUT_SECONDS", 60.0)
        self.DRAFTING_MAX_ATTEMPTS = max(1, get_int("DRAFTING_MAX_ATTEMPTS", 2))
        self.DRAFTING_TEMPERATURE = get_float("DRAFTING_TEMPERATURE", 0.5)

        # === Demand terms ===
        self.DEFAULT_DEADLINE_DAYS = get_int("DEFAULT_DEADLINE_DAYS", 30)
        self.PAYMENT_DAYS = get_int("PAYMENT_DAYS", 10)

        # === Reasonableness of charges ===
        self.CMS_LOCALITY = get_env("CMS_LOCALITY", required=False, default="CA-LA")
        self.REASONABLE_VARIANCE_PCT = get_float("REASONABLE_VARIANCE_PCT", 150.0)
        self.HIGH_VARIANCE_PCT = get_float("HIGH_VARIANCE_PCT", 250.0)
        self.REASONABLENESS_ROW_LIMIT = get_int("REASONABLENESS_ROW_LIMIT", 10)

        # === Damages model ===
        self.SEVERITY_MULTIPLIERS = get_multipliers("SEVERITY_MULTIPLIERS", DEFAULT_SEVERITY_MULTIPLIERS)
        self.LIABILITY_MULTIPLIERS = get_multipliers("LIABILITY_MULTIPLIERS", DEFAULT_LIABILITY_MULTIPLIERS)

        # === Comparable outcomes ===
        self.COMPARABLE_VERDICT_LIMIT = get_int("COMPARABLE_VERDICT_LIMIT", 5)


# === Accessor ===
def get_config() -> AppConfig:
    return AppConfig()
