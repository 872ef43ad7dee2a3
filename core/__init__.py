"""Accountability core library — period records, carry-over and sharing.

Public API re-exports for convenient imports:
    from core import open_daily, open_weekly, format_share_text, ...
"""

# Workspace & config
from core.workspace import (
    workspace_root,
    config_path,
    daily_store_path,
    weekly_store_path,
    log_path,
    load_config,
    init_workspace,
    get_user_timezone,
    now_local,
    today_str,
    open_daily,
    open_weekly,
)

# File I/O
from core.fileio import (
    read_text,
    read_json,
    read_yaml,
    write_json_atomic,
    write_yaml_atomic,
)

# Periods
from core.periods import (
    DAILY,
    WEEKLY,
    parse_key,
    week_start,
    iso_week,
    current_period_key,
    period_metadata,
    previous_period_key,
    next_period_key,
    format_week_display,
    format_day_display,
)

# Store
from core.store import (
    RecordStore,
    MemoryStore,
    JsonFileStore,
    StoreError,
    DuplicateRecordError,
    RecordNotFoundError,
)

# Lifecycles
from core.lifecycle import PeriodLifecycle, elapsed_days
from core.daily import carry_over_daily, daily_lifecycle
from core.weekly import carry_over_weekly, weekly_lifecycle, needs_reminder

# Sharing
from core.export import (
    status_emoji,
    period_title,
    format_share_text,
    outcome_counts,
)

# Models
from core.models import (
    Item,
    WeekMeta,
    PeriodRecord,
    User,
    AppConfig,
    ITEM_STATUSES,
    RECORD_STATUSES,
    SECTIONS,
    SECTION_CYCLE,
    validate_item,
    validate_items,
)
