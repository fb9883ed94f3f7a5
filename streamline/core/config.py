from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Streamline Shipping Website"
    HOST: str = "0.0.0.0"
    PORT: int = 5000
    PUBLIC_DIR: str = "Public"
    CORS_ORIGINS: List[str] = ["*"]

    # Mail account used to send the notifications (Gmail needs an App Password)
    SMTP_USER: str = ""
    SMTP_PASS: str = ""
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 465
    SMTP_SECURITY: str = "ssl"
    TO_EMAIL: str = ""

    MAIL_BACKEND: str = "smtp"
    MAIL_RELAY_URL: str = ""
    MAIL_RELAY_TOKEN: str = ""
    MAIL_FROM_NAME: str = "Streamline Shipping Website"
    MAIL_SEND_TIMEOUT: float = 20.0

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
