from pathlib import Path

from pydantic_settings import BaseSettings

DEFAULT_TEMPLATE = str(Path(__file__).parent / "templates" / "landwind-v1" / "index.html")


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    llm_provider: str = "groq"
    groq_api_key: str = ""
    groq_api_url: str = "https://api.groq.com/openai/v1/chat/completions"
    groq_model: str = "llama-3.3-70b-versatile"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    extraction_timeout: float = 10.0
    rate_limit_retry_delay: float = 2.0
    template_source: str = DEFAULT_TEMPLATE
    template_id: str = "landwind-v1"
    template_timeout: float = 10.0
    strict_template: bool = False
    primary_color: str = "#14b8a6"
    secondary_color: str = "#7e3af2"
    font_family: str = "Cairo"
    rtl: bool = True
    log_level: str = "INFO"
