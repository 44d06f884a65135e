# campuslink/services/verification_service.py
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone, timedelta
from typing import Callable

from sqlalchemy.orm import Session

from campuslink.data.models.user import UserModel
from campuslink.data.models.verification_code import VerificationCodeModel
from campuslink.domain.errors import AuthenticationRequired, InvalidCode
from campuslink.domain.phone import require_phone
from campuslink.repos.user_repo import UserRepo
from campuslink.repos.verification_repo import VerificationRepo
from campuslink.services.throttle_service import ThrottleService
from campuslink.utils.settings import VERIFICATION_CODE_TTL_SECONDS
from campuslink.utils.logging import get_logger

logger = get_logger(__name__)

CODE_LENGTH = 6


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # sqlite zwraca naive datetime
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def generate_code() -> str:
    return f"{secrets.randbelow(10 ** CODE_LENGTH):0{CODE_LENGTH}d}"


@dataclass(frozen=True)
class IssuedCode:
    code: str
    phone: str
    expires_at: datetime


@dataclass(frozen=True)
class VerificationResult:
    verified: bool
    reason: str | None = None  # invalid | expired | consumed | no_pending_code


class VerificationService:
    """
    One-time phone verification codes.

    issue: nowy 6-cyfrowy kod, waznosc TTL, nadpisuje poprzedni kod usera
    validate: sprawdza tylko ostatnio wydany kod i zuzywa go atomowo
    Zly/wygasly/zuzyty kod to normalny wynik (verified=False), nie wyjatek.
    """

    def __init__(
        self,
        db: Session,
        throttle: ThrottleService | None = None,
        clock: Callable[[], datetime] = utcnow,
        ttl_seconds: int = VERIFICATION_CODE_TTL_SECONDS,
    ):
        self.repo = VerificationRepo(db)
        self.users = UserRepo(db)
        self.throttle = throttle
        self.clock = clock
        self.ttl = timedelta(seconds=ttl_seconds)

    def issue(self, phone: str, user: UserModel | None) -> IssuedCode:
        if user is None:
            raise AuthenticationRequired("User not authenticated")

        normalized = require_phone(phone)

        if self.throttle is not None:
            self.throttle.hit("user", str(user.id))
            self.throttle.hit("phone", normalized)

        now = self.clock()
        row = self.repo.create_code(
            VerificationCodeModel(
                owner_id=user.id,
                phone=normalized,
                code=generate_code(),
                created_at=now,
                expires_at=now + self.ttl,
            )
        )

        logger.info(f"Verification code {row.id} issued for user {user.id}, expires at {row.expires_at}")
        return IssuedCode(code=row.code, phone=normalized, expires_at=_as_utc(row.expires_at))

    def validate(self, code: str, user: UserModel | None) -> VerificationResult:
        if user is None:
            raise AuthenticationRequired("User not authenticated")

        code = (code or "").strip()
        if len(code) != CODE_LENGTH or not code.isdigit():
            raise InvalidCode()

        latest = self.repo.get_latest_for_owner(user.id)
        if latest is None:
            logger.info(f"Verification failed for user {user.id}: no code issued")
            return VerificationResult(verified=False, reason="no_pending_code")

        if not secrets.compare_digest(latest.code, code):
            logger.info(f"Verification failed for user {user.id}: code mismatch")
            return VerificationResult(verified=False, reason="invalid")

        if latest.consumed_at is not None:
            logger.info(f"Verification failed for user {user.id}: code {latest.id} already consumed")
            return VerificationResult(verified=False, reason="consumed")

        now = self.clock()
        if now >= _as_utc(latest.expires_at):
            logger.info(f"Verification failed for user {user.id}: code {latest.id} expired")
            return VerificationResult(verified=False, reason="expired")

        # atomowy consume, przegrany wyscig = 0 rows
        rowcount = self.repo.consume(latest.id, now)
        if rowcount == 0:
            self.repo.rollback()
            logger.warning(f"Code {latest.id} for user {user.id} consumed concurrently")
            return VerificationResult(verified=False, reason="consumed")

        self.users.mark_phone_verified(user.id, latest.phone)
        self.repo.commit()

        logger.info(f"Phone {latest.phone} verified for user {user.id}")
        return VerificationResult(verified=True)
