"""
Two-Stage Input Validation

DESIGN DECISION: User input reaches the ledger as *Draft models and
only becomes a record after validation:

STAGE 1 - SCHEMA VALIDATION:
- Amount present, parseable and positive
- Required text present
- Account / category selected
- Field formats (currency code, hex color)
Any error here rejects the input with a human-readable message.

STAGE 2 - SEMANTIC VALIDATION:
- Unusually large amounts
- Dates too far in the future
- Category type not matching the operation type
- Goal deadlines already past
These are warnings: they never block, they are shown for review.

IMPORTANT: Validation NEVER silently fixes issues, and a rejected
input never causes a partial state change.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Sequence, Union

from pydantic import BaseModel, ValidationError

from financeflow.config import LedgerSettings, get_settings
from financeflow.models.finance import (
    RECORD_MODELS,
    Account,
    AccountDraft,
    Budget,
    BudgetDraft,
    Category,
    CategoryDraft,
    Goal,
    GoalDraft,
    Operation,
    OperationDraft,
    RecordKind,
)
from financeflow.models.views import ValidationIssue, ValidationResult


class LedgerValidationError(ValueError):
    """
    Input rejected at the boundary.

    The message joins every error-level issue; the full
    ValidationResult is available as `.result`.
    """

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__("; ".join(result.errors) or "Invalid input")

    @classmethod
    def single(cls, record_kind: str, field: str, message: str) -> "LedgerValidationError":
        return cls(ValidationResult(
            record_kind=record_kind,
            schema_valid=False,
            issues=[ValidationIssue(
                field=field,
                issue_type="invalid_value",
                message=message,
                severity="error",
            )],
        ))


def parse_amount(raw: Union[Decimal, str, int, None]) -> Optional[Decimal]:
    """
    Parse a user-typed amount.

    Accepts a comma as decimal separator. Returns None when the
    text is empty or not a finite number.
    """
    if raw is None:
        return None
    if isinstance(raw, Decimal):
        value = raw
    else:
        text = str(raw).strip().replace(" ", "").replace(",", ".")
        if not text:
            return None
        try:
            value = Decimal(text)
        except InvalidOperation:
            return None
    if not value.is_finite():
        return None
    return value


def _error(field: str, issue_type: str, message: str, fix: Optional[str] = None) -> ValidationIssue:
    return ValidationIssue(
        field=field,
        issue_type=issue_type,
        message=message,
        severity="error",
        suggested_fix=fix,
    )


def _warning(field: str, issue_type: str, message: str, fix: Optional[str] = None) -> ValidationIssue:
    return ValidationIssue(
        field=field,
        issue_type=issue_type,
        message=message,
        severity="warning",
        suggested_fix=fix,
    )


class LedgerValidator:
    """
    Validates user input before it becomes a ledger record.

    Each `*_from_draft` method returns a valid record or raises
    LedgerValidationError. The matching `validate_*` method returns
    the ValidationResult without raising, for forms that want to
    show warnings before saving.
    """

    def __init__(self, settings: Optional[LedgerSettings] = None):
        self._settings = settings or get_settings().ledger

    # ------------------------------------------------------------------
    # Shared checks
    # ------------------------------------------------------------------

    def _check_positive_amount(
        self,
        raw: Any,
        field: str,
        issues: list[ValidationIssue],
        message: str = "Enter a valid amount",
    ) -> Optional[Decimal]:
        value = parse_amount(raw)
        if value is None or value <= 0:
            issues.append(_error(
                field, "invalid_value", message,
                "Use a positive number, e.g. 1500.50",
            ))
            return None
        if value > Decimal(str(self._settings.max_operation_amount)):
            issues.append(_warning(
                field, "suspicious_value",
                f"Amount ({value:,.2f}) seems unusually high",
                "Please verify this amount is correct",
            ))
        return value

    def _currency(self, raw: Optional[str]) -> str:
        return (raw or self._settings.default_currency).strip().upper()

    def _check_currency(self, currency: str, issues: list[ValidationIssue]) -> None:
        if len(currency) != 3 or not currency.isalpha():
            issues.append(_error(
                "currency", "invalid_format",
                f"Currency must be a 3-letter code, got '{currency}'",
            ))

    def _build(
        self,
        record_kind: RecordKind,
        data: dict[str, Any],
        issues: list[ValidationIssue],
    ) -> tuple[ValidationResult, Optional[BaseModel]]:
        """Run the model on the collected data and fold its errors into the result."""
        record = None
        if not any(issue.severity == "error" for issue in issues):
            try:
                record = RECORD_MODELS[record_kind].model_validate(data)
            except ValidationError as e:
                for err in e.errors():
                    location = ".".join(str(part) for part in err["loc"]) or record_kind.value
                    issues.append(_error(location, "invalid_value", err["msg"]))

        schema_valid = not any(issue.severity == "error" for issue in issues)
        result = ValidationResult(
            record_kind=record_kind.value,
            schema_valid=schema_valid,
            semantic_valid=not any(issue.severity == "warning" for issue in issues),
            issues=issues,
        )
        return result, record if schema_valid else None

    @staticmethod
    def _raise_or_return(result: ValidationResult, record: Optional[BaseModel]):
        if record is None:
            raise LedgerValidationError(result)
        return record

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def validate_operation(
        self,
        draft: OperationDraft,
        categories: Sequence[Category] = (),
    ) -> tuple[ValidationResult, Optional[Operation]]:
        issues: list[ValidationIssue] = []

        # Stage 1: schema
        amount = self._check_positive_amount(draft.amount, "amount", issues)
        if draft.account_id is None:
            issues.append(_error("account_id", "missing", "Select an account"))
        if draft.category_id is None:
            issues.append(_error("category_id", "missing", "Select a category"))
        currency = self._currency(draft.currency)
        self._check_currency(currency, issues)

        # Stage 2: semantic
        when = draft.date or datetime.now()
        tolerance = timedelta(days=self._settings.future_date_tolerance_days)
        if when > datetime.now() + tolerance:
            issues.append(_warning(
                "date", "future_date",
                f"Operation date ({when.date()}) is in the future",
                "Please verify the date is correct",
            ))

        category = next((c for c in categories if c.id == draft.category_id), None)
        if category is not None and category.category_type != draft.operation_type:
            issues.append(_warning(
                "category_id", "type_mismatch",
                f"Category '{category.name}' is meant for "
                f"{category.category_type.display_name.lower()} operations",
            ))

        return self._build(RecordKind.OPERATIONS, {
            "operation_type": draft.operation_type,
            "amount": amount,
            "currency": currency,
            "category_id": draft.category_id,
            "date": when,
            "account_id": draft.account_id,
            "description": draft.description,
        }, issues)

    def operation_from_draft(
        self,
        draft: OperationDraft,
        categories: Sequence[Category] = (),
    ) -> Operation:
        return self._raise_or_return(*self.validate_operation(draft, categories))

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def validate_account(self, draft: AccountDraft) -> tuple[ValidationResult, Optional[Account]]:
        issues: list[ValidationIssue] = []

        # An empty balance means zero; anything typed must parse
        balance = Decimal("0")
        if draft.balance is not None and str(draft.balance).strip():
            balance = parse_amount(draft.balance)
            if balance is None:
                issues.append(_error("balance", "invalid_value", "Enter a valid balance"))

        currency = self._currency(draft.currency)
        self._check_currency(currency, issues)

        return self._build(RecordKind.ACCOUNTS, {
            "name": draft.name or draft.account_type.display_name,
            "balance": balance,
            "currency": currency,
            "account_type": draft.account_type,
        }, issues)

    def account_from_draft(self, draft: AccountDraft) -> Account:
        return self._raise_or_return(*self.validate_account(draft))

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def validate_category(self, draft: CategoryDraft) -> tuple[ValidationResult, Optional[Category]]:
        issues: list[ValidationIssue] = []
        if not draft.name:
            issues.append(_error("name", "missing", "Enter a category name"))

        color = draft.color.lstrip("#")
        if len(color) != 6 or any(c not in "0123456789abcdefABCDEF" for c in color):
            issues.append(_error(
                "color", "invalid_format",
                f"Color must be a 6-digit hex value, got '{draft.color}'",
                "Use a value like FF6B6B",
            ))

        return self._build(RecordKind.CATEGORIES, {
            "name": draft.name,
            "icon": draft.icon,
            "color": color.upper(),
            "category_type": draft.category_type,
            "is_custom": True,
        }, issues)

    def category_from_draft(self, draft: CategoryDraft) -> Category:
        return self._raise_or_return(*self.validate_category(draft))

    # ------------------------------------------------------------------
    # Budgets
    # ------------------------------------------------------------------

    def validate_budget(self, draft: BudgetDraft) -> tuple[ValidationResult, Optional[Budget]]:
        issues: list[ValidationIssue] = []
        limit = self._check_positive_amount(
            draft.limit, "limit", issues, message="Enter a valid budget limit",
        )
        if draft.category_id is None:
            issues.append(_error("category_id", "missing", "Select a category"))
        currency = self._currency(draft.currency)
        self._check_currency(currency, issues)

        return self._build(RecordKind.BUDGETS, {
            "category_id": draft.category_id,
            "limit": limit,
            "period": draft.period,
            "start_date": draft.start_date or date.today(),
            "currency": currency,
        }, issues)

    def budget_from_draft(self, draft: BudgetDraft) -> Budget:
        return self._raise_or_return(*self.validate_budget(draft))

    # ------------------------------------------------------------------
    # Goals
    # ------------------------------------------------------------------

    def validate_goal(self, draft: GoalDraft) -> tuple[ValidationResult, Optional[Goal]]:
        issues: list[ValidationIssue] = []
        if not draft.name:
            issues.append(_error("name", "missing", "Enter a goal name"))
        target = self._check_positive_amount(
            draft.target_amount, "target_amount", issues, message="Enter a valid target amount",
        )
        if draft.account_id is None:
            issues.append(_error("account_id", "missing", "Select an account"))
        if draft.deadline is None:
            issues.append(_error("deadline", "missing", "Choose a deadline"))
        elif draft.deadline < date.today():
            issues.append(_warning(
                "deadline", "past_date",
                f"Deadline ({draft.deadline}) is already in the past",
            ))
        currency = self._currency(draft.currency)
        self._check_currency(currency, issues)

        return self._build(RecordKind.GOALS, {
            "name": draft.name,
            "target_amount": target,
            "deadline": draft.deadline,
            "currency": currency,
            "account_id": draft.account_id,
        }, issues)

    def goal_from_draft(self, draft: GoalDraft) -> Goal:
        return self._raise_or_return(*self.validate_goal(draft))

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def validate_update(
        self,
        record_kind: RecordKind,
        record: BaseModel,
        fields: dict[str, Any],
    ) -> BaseModel:
        """
        Check a partial update against the record it modifies.

        Returns the merged record, or raises LedgerValidationError.
        """
        if record_kind == RecordKind.OPERATIONS:
            raise LedgerValidationError.single(
                record_kind.value, "operation", "Operations cannot be edited, only deleted",
            )
        if "id" in fields and fields["id"] != record.id:
            raise LedgerValidationError.single(record_kind.value, "id", "Record id cannot be changed")

        model = RECORD_MODELS[record_kind]
        unknown = sorted(set(fields) - set(model.model_fields))
        if unknown:
            raise LedgerValidationError.single(
                record_kind.value, unknown[0], f"Unknown field: {unknown[0]}",
            )

        issues: list[ValidationIssue] = []
        result, merged = self._build(record_kind, {**record.model_dump(), **fields}, issues)
        return self._raise_or_return(result, merged)

    def require_positive(self, amount: Any, field: str = "amount") -> Decimal:
        """Parse an amount that must be positive, e.g. a goal top-up."""
        value = parse_amount(amount)
        if value is None or value <= 0:
            raise LedgerValidationError.single("goals", field, "Amount must be positive")
        return value

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a user-friendly summary of validation results.

        This is what forms show next to the Save button.
        """
        if result.is_valid and not result.warnings:
            return "✅ All checks passed."

        lines = []

        if result.has_errors:
            lines.append("❌ Please fix the following:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
