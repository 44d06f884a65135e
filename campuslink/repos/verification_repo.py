# campuslink/repos/verification_repo.py
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from campuslink.data.models.verification_code import VerificationCodeModel


class VerificationRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_code(self, code: VerificationCodeModel) -> VerificationCodeModel:
        self.db.add(code)
        self.db.commit()
        self.db.refresh(code)
        return code

    def get_latest_for_owner(self, owner_id: int) -> VerificationCodeModel | None:
        """
        Tylko ostatnio wydany kod sie liczy, starsze sa nadpisane.
        id jako tie-break gdy created_at jest takie samo.
        """
        stmt = (
            select(VerificationCodeModel)
            .where(VerificationCodeModel.owner_id == owner_id)
            .order_by(
                VerificationCodeModel.created_at.desc(),
                VerificationCodeModel.id.desc(),
            )
            .limit(1)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def consume(self, code_id: int, now: datetime) -> int:
        """
        Atomowy warunkowy update:
        UPDATE verification_codes SET consumed_at = now
        WHERE id = :id AND consumed_at IS NULL AND expires_at > now
        Zwraca rowcount, 1 = wygralismy, 0 = ktos byl pierwszy albo wygasl.
        """
        stmt = (
            update(VerificationCodeModel)
            .where(
                VerificationCodeModel.id == code_id,
                VerificationCodeModel.consumed_at.is_(None),
                VerificationCodeModel.expires_at > now,
            )
            .values(consumed_at=now)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
