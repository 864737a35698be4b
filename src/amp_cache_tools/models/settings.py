import dotenv
from pydantic.v1 import BaseSettings


class EnvSettings(BaseSettings):
    # signing key, PEM encoded PKCS#1 RSA
    private_key_location: str = "private-key.pem"
    private_key_password: str = ""
    # keep the loaded key for the process lifetime instead of reading it per purge
    cache_private_key: bool = False

    # seconds per HTTP call
    request_timeout: float = 10.0

    # debug
    verbose: bool = False

    class Config:
        env_file = dotenv.find_dotenv(usecwd=True)
        env_prefix = ""


env = EnvSettings()
