"""
Role-dependent read-only summary for the dashboard.
"""
from dataclasses import dataclass, field
from typing import List

from sqlalchemy.orm import Session

from grc.core.policy import Actor, Capability, has_capability
from grc.db.models import Evidence, ThirdParty, User
from grc.services.evidence_service import EvidenceService
from grc.services.third_party_service import ThirdPartyService
from grc.services.user_service import UserService


@dataclass
class Profile:
    user: User
    evidence: List[Evidence] = field(default_factory=list)
    third_parties: List[ThirdParty] = field(default_factory=list)
    users: List[User] = field(default_factory=list)

    @property
    def stats(self) -> dict:
        # Counts follow the populated lists, so a client always sees zero third parties
        return {
            "evidenceCount": len(self.evidence),
            "thirdPartyCount": len(self.third_parties),
            "clientCount": len(self.users),
        }


class ProfileService:
    def __init__(self, db: Session, evidence: EvidenceService, third_parties: ThirdPartyService):
        self.db = db
        self.evidence = evidence
        self.third_parties = third_parties

    def get_profile(self, user: User) -> Profile:
        actor = Actor.from_user(user)
        profile = Profile(user=user)

        if has_capability(actor, Capability.VIEW_ALL_RECORDS):
            profile.evidence = self.evidence.list_all()
            profile.third_parties = self.third_parties.list_all()
            profile.users = UserService(self.db).all_clients()
        elif has_capability(actor, Capability.LIST_OWN_EVIDENCE):
            profile.evidence = self.evidence.list_for_owner(actor.id)

        return profile
