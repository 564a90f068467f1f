from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    SALES = "sales"

    def __str__(self):
        return self.value


class PricingType(str, Enum):
    FLAT = "flat"
    HOURLY = "hourly"

    def __str__(self):
        return self.value


class LeadStatus(str, Enum):
    IN_PROGRESS = "In Progress"
    PROPOSAL_SENT = "Proposal Sent"
    WON = "Won"
    LOST = "Lost"
    ON_HOLD = "On Hold"

    def __str__(self):
        return self.value


class PricingMode(str, Enum):
    """How a line item write arrives at its stored price."""
    CATALOG = "catalog"
    MANUAL = "manual"

    def __str__(self):
        return self.value


class TimeRange(str, Enum):
    ALL = "all"
    PAST_30_DAYS = "past30days"
    PAST_90_DAYS = "past90days"
    PAST_YEAR = "pastyear"

    def __str__(self):
        return self.value


class AuditAction(str, Enum):
    CREATE_QUOTE = "create_quote"
    UPDATE_QUOTE = "update_quote"
    UPDATE_QUOTE_STATUS = "update_quote_status"
    DELETE_QUOTE = "delete_quote"
    ADD_LINE_ITEM = "add_line_item"
    UPDATE_LINE_ITEM = "update_line_item"
    REMOVE_LINE_ITEM = "remove_line_item"
    RECALCULATE_QUOTE = "recalculate_quote"
    CREATE_CATALOG_ITEM = "create_catalog_item"
    UPDATE_CATALOG_ITEM = "update_catalog_item"
    DELETE_CATALOG_ITEM = "delete_catalog_item"
    CREATE_USER = "create_user"
    UPDATE_USER = "update_user"
    DELETE_USER = "delete_user"
    UPDATE_SETTINGS = "update_settings"
    LOGIN = "login"

    def __str__(self):
        return self.value
