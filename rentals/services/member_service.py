"""Member service - registration and account management."""

import logging

from django.utils import timezone

from rentals.domain import Member, MemberId, MembershipTier
from rentals.domain.errors import MemberNotFoundError
from rentals.services.base import Clock, parse_id
from rentals.stores import BookingLock, MemberStore

logger = logging.getLogger(__name__)


class MemberService:
    """Service for member account operations."""

    def __init__(
        self,
        member_store: MemberStore,
        lock: BookingLock,
        clock: Clock = timezone.now,
    ) -> None:
        self._members = member_store
        self._lock = lock
        self._clock = clock

    def register_member(
        self, *, name: str, email: str, tier: MembershipTier = MembershipTier.BASIC
    ) -> Member:
        """Create a member account.

        Raises:
            ValueError: If the name or email is malformed.
            DuplicateEmailError: If the email is already registered.
        """
        member = Member.create(name=name, email=email, join_date=self._clock().date(), tier=tier)
        self._members.add(member)
        logger.info("Registered member %s at tier %s", member.id, tier.value)
        return member

    def get_member(self, member_id: str | MemberId) -> Member:
        """Return a member by ID.

        Raises:
            InvalidIdentifierError: If the member_id is not a valid UUID.
            MemberNotFoundError: If the member does not exist.
        """
        parsed = parse_id(MemberId, member_id, "member")
        member = self._members.get(parsed)
        if member is None:
            raise MemberNotFoundError(str(parsed))
        return member

    def upgrade_tier(self, member_id: str | MemberId, tier: MembershipTier) -> Member:
        parsed = parse_id(MemberId, member_id, "member")
        with self._lock.hold(parsed):
            current = self.get_member(parsed)
            member = current.upgrade_tier(tier)
            self._members.save(member)
        logger.info("Member %s tier %s -> %s", parsed, current.tier.value, tier.value)
        return member

    def deactivate_member(self, member_id: str | MemberId) -> Member:
        parsed = parse_id(MemberId, member_id, "member")
        with self._lock.hold(parsed):
            member = self.get_member(parsed).deactivate()
            self._members.save(member)
        logger.info("Deactivated member %s", parsed)
        return member

    def reactivate_member(self, member_id: str | MemberId) -> Member:
        parsed = parse_id(MemberId, member_id, "member")
        with self._lock.hold(parsed):
            member = self.get_member(parsed).reactivate()
            self._members.save(member)
        logger.info("Reactivated member %s", parsed)
        return member

    def update_contact(
        self,
        member_id: str | MemberId,
        *,
        name: str | None = None,
        email: str | None = None,
    ) -> Member:
        """Change a member's name and/or email.

        Raises:
            DuplicateEmailError: If the new email belongs to another member.
        """
        parsed = parse_id(MemberId, member_id, "member")
        with self._lock.hold(parsed):
            member = self.get_member(parsed)
            if name is not None:
                member = member.update_name(name)
            if email is not None:
                member = member.update_email(email)
            self._members.save(member)
        logger.info("Updated contact details for member %s", parsed)
        return member
