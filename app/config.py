from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "SGQ_", "env_file": ".env", "env_file_encoding": "utf-8"}

    db_path: str = Field(default="sgq.db")
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)
    cors_origins: str = Field(default="http://localhost:5173")
    default_username: str = Field(default="admin")

    # Tabular exchange
    import_max_concurrency: int = Field(default=1, ge=1, le=8)
    import_max_reasons: int = Field(default=20, ge=0)
    export_max_line_items: int = Field(default=10, ge=1)
    currency_format: str = Field(default='"R$" #,##0.00')
    date_format: str = Field(default="%d/%m/%Y")


settings = Settings()
