from pydantic_settings import BaseSettings, SettingsConfigDict
from decouple import config


class Settings(BaseSettings):
    """Server config settings"""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # name of app
    app_name: str = "DChain Node Proxy"

    # Environment type
    env: str = config("ENV", default="test")
    log_level: str = config("LOG_LEVEL", default="INFO")

    # Node settings
    rpc_url: str = config("RPC_URL", default="http://127.0.0.1:26657")
    api_url: str = config("API_URL", default="http://127.0.0.1:1317")
    rpc_timeout: float = config("RPC_TIMEOUT", default=30.0, cast=float)
    max_connections: int = config("MAX_CONNECTIONS", default=20, cast=int)

    # Reconstruction settings
    validators_per_page: int = config("VALIDATORS_PER_PAGE", default=100, cast=int)
    genesis_fetch_concurrency: int = config(
        "GENESIS_FETCH_CONCURRENCY", default=1, cast=int
    )

    # Verifiable presentation settings
    vp_type_url: str = config(
        "VP_TYPE_URL", default="/dchain.tx.v1.MsgVerifiablePresentation"
    )
    vp_memo: str = config("VP_MEMO", default="Verifiable Presentation")
    valoper_prefix: str = config("VALOPER_PREFIX", default="cosmosvaloper")
    presentation_tx_index: int = config("PRESENTATION_TX_INDEX", default=0, cast=int)
    strict_presentations: bool = config(
        "STRICT_PRESENTATIONS", default=False, cast=bool
    )

    allowed_hosts: list = ["*"]


CONFIG = Settings()
