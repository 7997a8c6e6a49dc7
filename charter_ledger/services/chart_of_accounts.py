"""
Chart of accounts registry.

Lookups never fall back to a default account: an unknown code
comes back as None (or AccountNotFoundError from get_by_code),
and callers that want a fallback choose it themselves.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from charter_ledger.exceptions import AccountNotFoundError
from charter_ledger.models.enums import AccountType
from charter_ledger.models.ledger_account import LedgerAccount
from charter_ledger.schemas.ledger import LedgerAccountCreate, NORMAL_BALANCE_BY_TYPE
from charter_ledger.services.default_chart import DEFAULT_CHART

logger = logging.getLogger(__name__)


class ChartOfAccountsService:

    def __init__(self, db: Session):
        self.db = db

    def find_by_code(self, code: str) -> LedgerAccount | None:
        return self.db.execute(
            select(LedgerAccount).where(LedgerAccount.code == code)
        ).scalar_one_or_none()

    def get_by_code(self, code: str) -> LedgerAccount:
        account = self.find_by_code(code)
        if account is None:
            raise AccountNotFoundError(code)
        return account

    def list_by_type(self, account_type: AccountType) -> list[LedgerAccount]:
        accounts = self.db.execute(
            select(LedgerAccount)
            .where(LedgerAccount.account_type == account_type)
            .order_by(LedgerAccount.code)
        ).scalars().all()
        return list(accounts)

    def list_all(self) -> list[LedgerAccount]:
        accounts = self.db.execute(
            select(LedgerAccount).order_by(LedgerAccount.code)
        ).scalars().all()
        return list(accounts)

    def list_active(self) -> list[LedgerAccount]:
        accounts = self.db.execute(
            select(LedgerAccount)
            .where(LedgerAccount.is_active.is_(True))
            .order_by(LedgerAccount.code)
        ).scalars().all()
        return list(accounts)

    def find_many(self, codes) -> dict[str, LedgerAccount]:
        """Return the accounts that exist among codes, keyed by code."""
        codes = set(codes)
        if not codes:
            return {}
        accounts = self.db.execute(
            select(LedgerAccount).where(LedgerAccount.code.in_(codes))
        ).scalars().all()
        return {a.code: a for a in accounts}

    def create(self, request: LedgerAccountCreate) -> LedgerAccount:
        """
        Create a new ledger account.

        Raises ValueError if the account code already exists.
        """
        if self.find_by_code(request.code):
            raise ValueError(f"Account with code '{request.code}' already exists")

        account = LedgerAccount(
            code=request.code,
            name=request.name,
            account_type=request.account_type,
            normal_balance=request.normal_balance,
            category=request.category,
            sub_type=request.sub_type,
            currency=request.currency,
        )
        self.db.add(account)
        self.db.flush()
        logger.info("Created account %s (%s)", account.code, account.account_type.value)
        return account

    def deactivate(self, code: str) -> LedgerAccount:
        """
        Deactivate an account.

        Accounts are never deleted because historical lines point
        at them. A deactivated account stays valid for existing
        entries and disappears from list_active().
        """
        account = self.get_by_code(code)
        account.is_active = False
        self.db.flush()
        logger.info("Deactivated account %s", code)
        return account

    def seed_default_chart(self) -> tuple[int, int]:
        """Insert the built-in chart. Existing codes are left untouched."""
        existing = self.find_many(row[0] for row in DEFAULT_CHART)
        created = 0
        for code, name, account_type, sub_type, category, currency in DEFAULT_CHART:
            if code in existing:
                continue
            self.db.add(LedgerAccount(
                code=code,
                name=name,
                account_type=account_type,
                normal_balance=NORMAL_BALANCE_BY_TYPE[account_type],
                category=category,
                sub_type=sub_type,
                currency=currency,
            ))
            created += 1
        self.db.flush()
        logger.info("Seeded chart of accounts: %d created, %d skipped", created, len(existing))
        return created, len(existing)
