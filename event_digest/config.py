from __future__ import annotations

import os
from dataclasses import dataclass

# --------------------------------
# 設定値

# Prismic のロケールと表示用タイムゾーン
LANG = "fr-FR"
DISPLAY_TIMEZONE = "Europe/Paris"

# Prismic のカスタムタイプ
EVENT_TYPE = "event"

# 週次ダイジェストの対象日数
WEEK_WINDOW_DAYS = 7

# 配信時刻（プロセスのローカル時刻）
DAILY_AT = "07:00"
WEEKLY_AT = "07:00"

DAILY_SUBJECT = "Rappel évènement(s) aujourd'hui"
WEEKLY_SUBJECT = "Au programme cette semaine"

DEFAULT_FROM_NAME = "Societe-Astronomique-Montpellier"
DEFAULT_LIST_NAME = "sam-liste"
DEFAULT_SMTP_PORT = 465
# --------------------------------

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class SmtpConfig:
    host: str
    port: int
    secure: bool
    user: str
    password: str


@dataclass
class Settings:
    prismic_repository: str
    smtp_host: str
    smtp_user: str
    smtp_password: str
    mailing_list: str
    prismic_access_token: str | None = None
    smtp_port: int = DEFAULT_SMTP_PORT
    smtp_secure: bool = True
    from_name: str = DEFAULT_FROM_NAME
    list_name: str = DEFAULT_LIST_NAME

    def smtp_config(self) -> SmtpConfig:
        return SmtpConfig(
            host=self.smtp_host,
            port=self.smtp_port,
            secure=self.smtp_secure,
            user=self.smtp_user,
            password=self.smtp_password,
        )

    @staticmethod
    def from_env() -> "Settings":
        def require(name: str) -> str:
            value = os.getenv(name)
            if value is None or not value.strip():
                raise ValueError(f"Environment variable {name} is required.")
            return value.strip()

        def optional_with_default(name: str, default: str) -> str:
            value = os.getenv(name)
            if value is None or not value.strip():
                return default
            return value.strip()

        def optional(name: str) -> str | None:
            value = os.getenv(name)
            if value is None or not value.strip():
                return None
            return value.strip()

        raw_port = optional_with_default("SMTP_PORT", str(DEFAULT_SMTP_PORT))
        try:
            smtp_port = int(raw_port)
        except ValueError as exc:
            raise ValueError(f"Environment variable SMTP_PORT must be an integer, got {raw_port!r}.") from exc

        raw_secure = optional_with_default("SMTP_SECURE", "true").lower()
        if raw_secure in _TRUE_VALUES:
            smtp_secure = True
        elif raw_secure in _FALSE_VALUES:
            smtp_secure = False
        else:
            raise ValueError(f"Environment variable SMTP_SECURE must be a boolean, got {raw_secure!r}.")

        return Settings(
            prismic_repository=require("PRISMIC_REPOSITORY"),
            prismic_access_token=optional("PRISMIC_ACCESS_TOKEN"),
            smtp_host=require("SMTP_HOST"),
            smtp_port=smtp_port,
            smtp_secure=smtp_secure,
            smtp_user=require("SMTP_USER"),
            smtp_password=require("SMTP_PWD"),
            mailing_list=require("SMTP_MAILLIST"),
            from_name=optional_with_default("FROM_NAME", DEFAULT_FROM_NAME),
            list_name=optional_with_default("LIST_NAME", DEFAULT_LIST_NAME),
        )
