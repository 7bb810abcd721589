import logging
from sqlalchemy import select
from sqlalchemy.orm import Session

from companygrow.models.app_setting import AppSetting

log = logging.getLogger("settings")


def get_setting(db: Session, key: str, default: str | None = None) -> str | None:
    value = db.execute(
        select(AppSetting.setting_value).where(AppSetting.setting_key == key)
    ).scalar_one_or_none()
    return default if value is None else value


def get_setting_int(db: Session, key: str, default: int | None = None) -> int | None:
    """Lee un setting numérico; si falta o no es entero devuelve `default`."""
    raw = get_setting(db, key)
    if raw is None:
        return default
    try:
        return int(str(raw).strip())
    except ValueError:
        log.warning("setting %s is not an integer: %r", key, raw)
        return default
