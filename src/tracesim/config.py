from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    rpc_url: str = "http://localhost:8545"
    rpc_rate_per_second: float = 10.0
    rpc_timeout: float = 30.0
    # Fungible tokens whose transferFrom returns no data (USDT, BNB, OMG)
    nonstandard_erc20_tokens: list[str] = [
        "0xdac17f958d2ee523a2206206994597c13d831ec7",
        "0xb8c77482e45f1f44de1745f52c74426c631bdd52",
        "0xd26114cd6ee289accf82350c8d8487fedb8a0c07",
    ]
    # System contracts whose transfer(token, to, amount) with token=0x0 mints native asset
    native_bridge_addresses: list[str] = [
        "0x0000000000000000000000000000000000001010",
    ]
    precompile_max_address: int = 0xFFF
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_prefix = "TRACESIM_"


settings = Settings()
