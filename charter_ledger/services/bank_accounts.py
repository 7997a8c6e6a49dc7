"""Bank account directory."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from charter_ledger.models.bank_account import BankAccount
from charter_ledger.schemas.settings import BankAccountCreate


class BankAccountService:

    def __init__(self, db: Session):
        self.db = db

    def create(self, request: BankAccountCreate) -> BankAccount:
        if self.db.get(BankAccount, request.id):
            raise ValueError(f"Bank account '{request.id}' already exists")
        bank_account = BankAccount(
            id=request.id,
            company_id=request.company_id,
            name=request.name,
            currency=request.currency,
            gl_account_code=request.gl_account_code,
        )
        self.db.add(bank_account)
        self.db.flush()
        return bank_account

    def get_by_id(self, bank_account_id: str) -> BankAccount | None:
        return self.db.get(BankAccount, bank_account_id)

    def list_for_company(self, company_id: str) -> list[BankAccount]:
        accounts = self.db.execute(
            select(BankAccount)
            .where(BankAccount.company_id == company_id)
            .order_by(BankAccount.name)
        ).scalars().all()
        return list(accounts)

    def resolve_gl_code(self, bank_account_id: str | None) -> str | None:
        """Ledger account code for a bank account, or None if unknown or unmapped."""
        if not bank_account_id:
            return None
        bank_account = self.get_by_id(bank_account_id)
        return bank_account.gl_account_code if bank_account else None
