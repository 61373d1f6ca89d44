import pytest

from pubtrack.core.authorization import UserRef, actor_from_claims
from pubtrack.core.catalog import NA, OrgTriple
from pubtrack.core.exceptions import (
    NotCreatableError,
    OrgScopeMismatchError,
    SelfModificationForbiddenError,
    UnknownRoleError,
)
from pubtrack.core.roles import Role

RAMAPURAM = "SRMIST RAMAPURAM"
TRICHY = "SRM TRICHY"
EASWARI = "EASWARI ENGINEERING COLLEGE"
ENGINEERING = "Engineering and Technology"
SCIENCE = "Science and Humanities"


class TestCanModify:
    def test_super_admin_may_modify_anyone(self, gate, make_user):
        actor = make_user("root", "super_admin")
        assert gate.can_modify(actor, make_user("x", "campus_admin", TRICHY, ENGINEERING))
        assert gate.can_modify(actor, make_user("y", "super_admin"))
        assert gate.can_modify(actor, actor)

    @pytest.mark.parametrize("role", ["campus_admin", "admin", "faculty"])
    def test_nobody_else_may_modify_themselves(self, gate, make_user, role):
        actor = make_user("me", role, TRICHY, ENGINEERING, NA if role == "campus_admin" else "Civil")
        assert isinstance(gate.authorize_modify(actor, actor), SelfModificationForbiddenError)
        assert gate.can_modify(actor, actor) is False

    def test_campus_admin_institute_mismatch(self, gate, make_user):
        actor = make_user("ca", "campus_admin", TRICHY, ENGINEERING)
        target = make_user("f", "faculty", TRICHY, SCIENCE, "Physics")
        assert gate.can_modify(actor, target) is False
        assert isinstance(gate.authorize_modify(actor, target), OrgScopeMismatchError)

    def test_campus_admin_same_institute(self, gate, make_user):
        actor = make_user("ca", "campus_admin", TRICHY, ENGINEERING)
        assert gate.can_modify(actor, make_user("f", "faculty", TRICHY, ENGINEERING, "Civil"))
        assert gate.can_modify(actor, make_user("a", "admin", TRICHY, ENGINEERING, "Civil"))

    def test_campus_admin_of_flat_college_ignores_institute(self, gate, make_user):
        actor = make_user("ca", "campus_admin", EASWARI)
        target = make_user("f", "faculty", EASWARI, "Legacy value", "Civil")
        assert gate.can_modify(actor, target)

    def test_campus_admin_other_college(self, gate, make_user):
        actor = make_user("ca", "campus_admin", EASWARI)
        assert gate.can_modify(actor, make_user("f", "faculty", TRICHY, ENGINEERING, "Civil")) is False

    def test_admin_only_modifies_faculty_in_same_institute(self, gate, make_user):
        actor = make_user("ad", "admin", RAMAPURAM, ENGINEERING, "Civil")
        assert gate.can_modify(actor, make_user("f", "faculty", RAMAPURAM, ENGINEERING, "Mechanical"))
        assert gate.can_modify(actor, make_user("f2", "faculty", RAMAPURAM, SCIENCE, "Physics")) is False
        assert gate.can_modify(actor, make_user("a2", "admin", RAMAPURAM, ENGINEERING, "Civil")) is False
        assert isinstance(
            gate.authorize_modify(actor, make_user("ca", "campus_admin", RAMAPURAM, ENGINEERING)),
            NotCreatableError,
        )

    def test_faculty_may_not_modify_anyone(self, gate, make_user):
        actor = make_user("f", "faculty", RAMAPURAM, ENGINEERING, "Civil")
        assert gate.can_modify(actor, make_user("f2", "faculty", RAMAPURAM, ENGINEERING, "Civil")) is False

    def test_delete_follows_modify(self, gate, make_user):
        actor = make_user("ca", "campus_admin", TRICHY, ENGINEERING)
        assert gate.can_delete(actor, make_user("f", "faculty", TRICHY, ENGINEERING, "Civil"))
        assert gate.can_delete(actor, make_user("f2", "faculty", TRICHY, SCIENCE, "Physics")) is False
        assert gate.can_delete(actor, actor) is False


class TestModifyWithChanges:
    def test_promotion_must_be_creatable(self, gate, make_user):
        actor = make_user("ad", "admin", RAMAPURAM, ENGINEERING, "Civil")
        target = make_user("f", "faculty", RAMAPURAM, ENGINEERING, "Civil")
        assert isinstance(gate.authorize_modify(actor, target, updated_role="admin"), NotCreatableError)
        assert gate.authorize_modify(actor, target, updated_role="faculty") is None

    def test_campus_admin_cannot_move_user_to_other_college(self, gate, make_user):
        actor = make_user("ca", "campus_admin", TRICHY, ENGINEERING)
        target = make_user("f", "faculty", TRICHY, ENGINEERING, "Civil")
        moved = OrgTriple(RAMAPURAM, ENGINEERING, "Civil")
        assert isinstance(gate.authorize_modify(actor, target, updated_triple=moved), OrgScopeMismatchError)

    def test_unknown_updated_role(self, gate, make_user):
        actor = make_user("ca", "campus_admin", TRICHY, ENGINEERING)
        target = make_user("f", "faculty", TRICHY, ENGINEERING, "Civil")
        assert isinstance(gate.authorize_modify(actor, target, updated_role="dean"), UnknownRoleError)


class TestAuthorizeCreate:
    def test_admin_cannot_create_campus_admin(self, gate, make_user):
        actor = make_user("ad", "admin", RAMAPURAM, ENGINEERING, "Civil")
        error = gate.authorize_create(actor, "campus_admin", OrgTriple(RAMAPURAM, ENGINEERING, NA))
        assert isinstance(error, NotCreatableError)
        assert error.to_dict()["target"] == "campus_admin"

    def test_super_admin_creates_anywhere(self, gate, make_user):
        actor = make_user("root", "super_admin")
        assert gate.authorize_create(actor, "campus_admin", OrgTriple(TRICHY, SCIENCE, NA)) is None

    def test_campus_admin_creates_inside_own_institute_only(self, gate, make_user):
        actor = make_user("ca", "campus_admin", TRICHY, ENGINEERING)
        assert gate.authorize_create(actor, "faculty", OrgTriple(TRICHY, ENGINEERING, "Civil")) is None
        assert gate.authorize_create(actor, "admin", OrgTriple(TRICHY, ENGINEERING, "Civil")) is None
        error = gate.authorize_create(actor, "faculty", OrgTriple(TRICHY, SCIENCE, "Physics"))
        assert isinstance(error, OrgScopeMismatchError)

    def test_unknown_target_role(self, gate, make_user):
        actor = make_user("root", "super_admin")
        assert isinstance(gate.authorize_create(actor, "dean", OrgTriple()), UnknownRoleError)

    def test_creatable_roles(self, gate, make_user):
        assert gate.creatable_roles(make_user("ad", "admin", RAMAPURAM, ENGINEERING, "Civil")) == [Role.FACULTY]


class TestActorContext:
    def test_actor_from_claims(self):
        actor = actor_from_claims({
            "userId": "abc",
            "role": "campus_admin",
            "college": TRICHY,
            "institute": ENGINEERING,
            "department": None,
        })
        assert actor == UserRef("abc", Role.CAMPUS_ADMIN, TRICHY, ENGINEERING, NA)

    def test_actor_from_claims_uses_sub(self):
        assert actor_from_claims({"sub": "s-1", "role": "super_admin"}).id == "s-1"

    def test_unknown_role_in_claims(self):
        with pytest.raises(UnknownRoleError):
            actor_from_claims({"userId": "abc", "role": "user"})

    def test_from_record_accepts_mongo_style_id(self):
        ref = UserRef.from_record({"_id": 42, "role": "faculty", "college": EASWARI, "department": "Civil"})
        assert ref.id == "42"
        assert ref.triple == OrgTriple(EASWARI, NA, "Civil")
