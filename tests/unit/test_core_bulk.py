import pytest

from pubtrack.core.bulk import BulkProvisioner, normalize_row
from pubtrack.core.catalog import NA
from pubtrack.core.roles import Role


@pytest.fixture()
def provisioner(pipeline, gate, store):
    return BulkProvisioner(pipeline, gate, store)


def test_normalize_row_accepts_loose_headers():
    row = normalize_row({"Full Name": " Asha ", "EMAIL": "a@x.in", "Faculty ID": 42, "Role": None})
    assert row == {
        "email": "a@x.in",
        "full_name": "Asha",
        "role": "",
        "college": "",
        "institute": "",
        "department": "",
        "faculty_id": "42",
    }


def test_super_admin_upload_reports_each_row(provisioner, store, make_user):
    actor = make_user("root", "super_admin")
    rows = [
        {"email": "a@srmtrichy.edu.in", "fullName": "Asha", "role": "faculty", "college": "srm trichy",
         "institute": "Engineering and Technology", "department": "Civil", "facultyId": "T1"},
        {"email": "b@srmtrichy.edu.in", "fullName": "Bala", "role": "", "college": "SRM TRICHY"},
        {"email": "c@gmail.com", "fullName": "Chitra", "role": "admin", "college": "SRM TRICHY",
         "institute": "Engineering and Technology", "department": "Civil", "facultyId": "T2"},
        {"email": "A@srmtrichy.edu.in", "fullName": "Asha Again", "role": "faculty", "college": "SRM TRICHY",
         "institute": "Engineering and Technology", "department": "Civil", "facultyId": "T3"},
    ]

    summary = provisioner.provision(actor, rows)

    assert summary.total == 4
    assert summary.success == 1
    assert summary.failed == 3
    assert summary.errors[0] == "Row 3: Role is required"
    assert summary.errors[1].startswith("Row 4: Email domain 'gmail.com' is not allowed")
    assert summary.errors[2] == "Row 5: Duplicate email 'A@srmtrichy.edu.in' in uploaded file"
    assert len(store) == 1
    created = summary.created[0]
    assert created.user.college == "SRM TRICHY"
    assert created.user.full_name == "Asha"
    assert created.created_by == "root"


@pytest.mark.parametrize(
    "row",
    [
        {"email": "a@srmtrichy.edu.in", "role": "faculty"},
        {"email": "a@srmtrichy.edu.in", "fullName": "   ", "role": "faculty"},
        {"fullName": "Asha", "role": "faculty"},
        {"email": "", "name": "Asha"},
    ],
)
def test_row_without_email_or_name_is_rejected(provisioner, store, make_user, row):
    actor = make_user("root", "super_admin")
    complete = {
        "college": "SRM TRICHY",
        "institute": "Engineering and Technology",
        "department": "Civil",
        "facultyId": "T1",
    }

    summary = provisioner.provision(actor, [{**complete, **row}])

    assert summary.errors == ["Row 2: Missing email or fullName"]
    assert summary.success == 0
    assert len(store) == 0


def test_campus_admin_always_creates_faculty_in_own_scope(provisioner, make_user):
    actor = make_user("ca", "campus_admin", "SRMIST RAMAPURAM", "Science and Humanities")
    rows = [{
        "email": "p@srmist.edu.in",
        "Full Name": "Priya",
        "role": "admin",
        "college": "SRM TRICHY",
        "institute": "Dental",
        "department": "Physics",
        "facultyId": "R1",
    }]

    summary = provisioner.provision(actor, rows)

    assert summary.to_dict()["success"] is True
    user = summary.created[0].user
    assert user.role is Role.FACULTY
    assert (user.college, user.institute, user.department) == (
        "SRMIST RAMAPURAM", "Science and Humanities", "Physics",
    )


def test_admin_cannot_create_admins(provisioner, make_user):
    actor = make_user("ad", "admin", "EASWARI ENGINEERING COLLEGE", NA, "Civil")
    rows = [
        {"email": "x@eec.srmrmp.edu.in", "name": "X", "role": "admin", "department": "Civil", "facultyId": "E1"},
        {"email": "y@eec.srmrmp.edu.in", "name": "Y", "department": "Civil", "facultyId": "E2"},
    ]

    summary = provisioner.provision(actor, rows, default_role="faculty")

    assert summary.errors == ["Row 2: You are not allowed to create role 'admin'"]
    assert summary.success == 1


def test_duplicate_faculty_id_in_file(provisioner, make_user):
    actor = make_user("ad", "admin", "EASWARI ENGINEERING COLLEGE", NA, "Civil")
    rows = [
        {"email": "x@eec.srmrmp.edu.in", "name": "X", "department": "Civil", "facultyId": "E1"},
        {"email": "y@eec.srmrmp.edu.in", "name": "Y", "department": "Civil", "facultyId": "e1"},
    ]
    summary = provisioner.provision(actor, rows, default_role="faculty")
    assert summary.errors == ["Row 3: Duplicate facultyId 'e1' in uploaded file"]


def test_existing_user_is_reported(provisioner, pipeline, store, make_user):
    actor = make_user("ad", "admin", "EASWARI ENGINEERING COLLEGE", NA, "Civil")
    existing = pipeline.process("faculty", actor.triple, "x@eec.srmrmp.edu.in", "E1")
    pipeline.commit(existing, store)

    summary = provisioner.provision(
        actor,
        [{"email": "x@eec.srmrmp.edu.in", "name": "X", "department": "Civil", "facultyId": "E9"}],
        default_role="faculty",
    )

    assert summary.to_dict() == {
        "success": False,
        "summary": {
            "total": 1,
            "success": 0,
            "failed": 1,
            "errors": ["Row 2: User with email 'x@eec.srmrmp.edu.in' already exists"],
        },
    }
