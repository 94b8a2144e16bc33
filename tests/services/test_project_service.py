import pytest

from app.core.errors import ConflictError, ForbiddenError, InvalidInputError, NotFoundError
from app.models.comment import Comment, CommentReaction
from app.models.project import Project
from app.models.project_statistic import ProjectStatistic
from app.models.project_user import ProjectUser
from app.models.task import Task, TaskAssignee
from app.services.comment_service import CommentService
from app.services.membership_service import MembershipService
from app.services.project_service import ProjectService
from app.services.task_service import TaskService


@pytest.fixture
def owner(create_test_user):
    return create_test_user(email="owner@example.com", name="Owner")


class TestCreateProject:
    """Test cases cho ProjectService.create"""

    def test_create_project(self, db_session, owner):
        service = ProjectService(db_session)

        project = service.create(owner.id, "Website Redesign", "New website", tags=["web", "ui"])

        assert project.is_approved is False
        assert project.noUsers == 1
        assert project.creator_id == owner.id
        assert sorted(service.tags(project.id)) == ["ui", "web"]
        assert MembershipService(db_session).is_member(project.id, owner.id)

    def test_duplicate_name(self, db_session, owner):
        service = ProjectService(db_session)
        service.create(owner.id, "Website Redesign", "New website")

        with pytest.raises(ConflictError):
            service.create(owner.id, "Website Redesign", "Another one")


class TestUpdateProject:
    def test_update_requires_a_field(self, create_project, db_session, owner):
        project = create_project(owner)

        with pytest.raises(InvalidInputError):
            ProjectService(db_session).update(project.id, owner.id)

    def test_only_owner_can_update(self, create_project, db_session, owner, create_test_user):
        project = create_project(owner)
        other = create_test_user(email="other@example.com")

        with pytest.raises(ForbiddenError):
            ProjectService(db_session).update(project.id, other.id, description="Hacked")

    def test_update_status(self, create_project, db_session, owner):
        project = create_project(owner)

        updated = ProjectService(db_session).update(project.id, owner.id, status="completed")

        assert updated.status == "completed"


class TestListProjects:
    def test_created_and_assigned(self, create_project, db_session, owner, create_test_user):
        """Test danh sách project đã tạo và project được thêm vào"""
        member = create_test_user(email="member@example.com")
        project = create_project(owner, tags=["web"])
        MembershipService(db_session).add_members(project.id, [member.id])
        service = ProjectService(db_session)

        created = service.list_created_by(owner.id)
        assigned = service.list_assigned_to(member.id)

        assert [p["id"] for p in created] == [project.id]
        assert created[0]["tags"] == ["web"]
        assert [p["id"] for p in assigned] == [project.id]
        assert service.list_created_by(member.id) == []


class TestDeleteProject:
    """Test cases cho ProjectService.delete"""

    def test_delete_removes_dependents(self, create_project, db_session, owner, create_test_user):
        """Test xóa project xóa luôn task, comment, statistics và membership"""
        member = create_test_user(email="member@example.com")
        project = create_project(owner, tags=["web"])
        MembershipService(db_session).add_members(project.id, [member.id])
        task = TaskService(db_session).create(
            project.id, "Design", None, None, "0", "0", owner.id, assignees=[member.id]
        )
        comments = CommentService(db_session)
        comment_id = comments.post(project.id, owner.id, content="Hi", task_id=task.id)
        comments.toggle_reaction(comment_id, member.id, like=True)

        ProjectService(db_session).delete(project.id, owner.id)

        db_session.expire_all()
        assert db_session.query(Project).count() == 0
        assert db_session.query(Task).count() == 0
        assert db_session.query(TaskAssignee).count() == 0
        assert db_session.query(Comment).count() == 0
        assert db_session.query(CommentReaction).count() == 0
        assert db_session.query(ProjectStatistic).count() == 0
        assert db_session.query(ProjectUser).count() == 0

    def test_delete_by_non_owner(self, create_project, db_session, owner, create_test_user):
        project = create_project(owner)
        other = create_test_user(email="other@example.com")

        with pytest.raises(ForbiddenError):
            ProjectService(db_session).delete(project.id, other.id)

    def test_delete_missing(self, db_session, owner):
        with pytest.raises(NotFoundError):
            ProjectService(db_session).delete("missing", owner.id)
