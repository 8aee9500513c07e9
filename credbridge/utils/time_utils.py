"""统一时间处理工具模块."""

from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

UTC_TZ = ZoneInfo("UTC")


class TimeUtils:
    """统一时间处理工具类."""

    @staticmethod
    def now() -> datetime:
        """获取当前 UTC 时间.

        Returns:
            带 UTC 时区信息的当前时间.

        """
        return datetime.now(UTC)

    @staticmethod
    def to_utc(dt: str | date | datetime | None) -> datetime | None:
        """将时间转换为 UTC 时区.

        无时区信息的时间视为 UTC(SQLite 读回的时间不带时区).

        Args:
            dt: 待转换的时间,可以是字符串、date 或 datetime 对象.

        Returns:
            转换后的 UTC 时区时间,转换失败时返回 None.

        """
        if not dt:
            return None

        try:
            if isinstance(dt, str):
                if dt.endswith("Z"):
                    dt = dt[:-1] + "+00:00"
                dt = datetime.fromisoformat(dt)
            elif isinstance(dt, date) and not isinstance(dt, datetime):
                dt = datetime.combine(dt, datetime.min.time())

            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=UTC_TZ)

            return dt.astimezone(UTC_TZ)
        except (ValueError, TypeError):
            return None

    @staticmethod
    def to_json_serializable(dt: str | date | datetime | None) -> str | None:
        """转换时间对象为 JSON 可序列化的 ISO 字符串.

        Args:
            dt: 字符串、date 或 datetime 实例.

        Returns:
            ISO 格式字符串;若无法转换则返回 None.

        """
        if not dt:
            return None
        if isinstance(dt, str):
            return dt
        if isinstance(dt, datetime):
            normalized = TimeUtils.to_utc(dt)
            return normalized.isoformat() if normalized else None
        return dt.isoformat()


time_utils = TimeUtils()
