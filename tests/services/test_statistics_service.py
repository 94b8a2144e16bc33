import pytest
from datetime import timedelta
from sqlalchemy import update

from app.core.errors import NotFoundError
from app.models.project_statistic import ProjectStatistic
from app.services.statistics_service import StatisticsService, completion_percentage
from app.services.task_service import TaskService
from app.utils.timeutils import utcnow


@pytest.fixture
def owner(create_test_user):
    return create_test_user(email="owner@example.com", name="Owner")


@pytest.fixture
def project(create_project, owner):
    return create_project(owner)


def _task(db_session, project, owner, title, deadline=None, status="0"):
    return TaskService(db_session).create(
        project.id, title, None, deadline, status, "0", owner.id
    )


class TestCompletionPercentage:
    """Test cases cho công thức completion_percentage"""

    @pytest.mark.parametrize("completed,total,expected", [
        (0, 0, 0),
        (0, 4, 0),
        (1, 4, 25),
        (3, 3, 100),
    ])
    def test_values(self, completed, total, expected):
        assert completion_percentage(completed, total) == pytest.approx(expected)

    def test_zero_total_is_never_nan(self):
        """Test total bằng 0 không sinh ra lỗi chia cho 0"""
        assert completion_percentage(0, 0) == 0.0


class TestStatisticsEvents:
    """Test cases cho các sự kiện cập nhật statistics"""

    def test_first_event_creates_row(self, db_session, project):
        service = StatisticsService(db_session)

        service.on_task_created(project.id)

        stat = service._find(project.id)
        assert stat.total_tasks == 1
        assert stat.completed_tasks == 0
        assert stat.last_updated is not None

    def test_events_without_row_are_ignored(self, db_session, project):
        """Test completed/deleted khi chưa có statistics chỉ log cảnh báo"""
        service = StatisticsService(db_session)

        service.on_task_completed(project.id)
        service.on_task_reopened(project.id)
        service.on_task_deleted(project.id, True)

        assert service._find(project.id) is None

    def test_increment_ignores_stale_loaded_values(self, db_session, project):
        """Test UPDATE dùng giá trị hiện tại trong DB, không dùng object đã load"""
        service = StatisticsService(db_session)
        service.on_task_created(project.id)
        stale = service._find(project.id)
        assert stale.total_tasks == 1

        # Một writer khác tăng counter mà session này không biết
        db_session.execute(
            update(ProjectStatistic)
            .where(ProjectStatistic.project_id == project.id)
            .values(total_tasks=ProjectStatistic.total_tasks + 5)
            .execution_options(synchronize_session=False)
        )
        db_session.commit()

        service.on_task_created(project.id)

        db_session.expire_all()
        assert service._find(project.id).total_tasks == 7

    def test_percentage_follows_counters(self, db_session, project):
        service = StatisticsService(db_session)
        for _ in range(4):
            service.on_task_created(project.id)
        service.on_task_completed(project.id)

        db_session.expire_all()
        stat = service._find(project.id)
        assert stat.completion_percentage == pytest.approx(25)

        service.on_task_deleted(project.id, False)
        db_session.expire_all()
        assert service._find(project.id).completion_percentage == pytest.approx(100 / 3)


class TestGetStatistics:
    """Test cases cho get_statistics và overdue"""

    def test_missing_statistics(self, db_session, project):
        with pytest.raises(NotFoundError):
            StatisticsService(db_session).get_statistics(project.id)

    def test_overdue_counted_at_read_time(self, db_session, project, owner):
        """Test overdue là task có deadline đã qua và chưa completed"""
        past = utcnow() - timedelta(days=2)
        future = utcnow() + timedelta(days=2)
        _task(db_session, project, owner, "Late", deadline=past)
        _task(db_session, project, owner, "Late but done", deadline=past, status="2")
        _task(db_session, project, owner, "On time", deadline=future)
        _task(db_session, project, owner, "No deadline")

        data = StatisticsService(db_session).get_statistics(project.id)

        assert data["total_tasks"] == 4
        assert data["overdue_tasks"] == 1


class TestReconcile:
    """Test cases cho reconcile"""

    def test_reconcile_repairs_drift(self, db_session, project, owner):
        """Test counter bị lệch được tính lại từ bảng task"""
        service = StatisticsService(db_session)
        task_service = TaskService(db_session)
        first = _task(db_session, project, owner, "First")
        _task(db_session, project, owner, "Second")
        task_service.edit_details(first.id, {"status": "2"})

        db_session.execute(
            update(ProjectStatistic)
            .where(ProjectStatistic.project_id == project.id)
            .values(total_tasks=10, completed_tasks=7)
            .execution_options(synchronize_session=False)
        )
        db_session.commit()
        db_session.expire_all()

        stat = service.reconcile(project.id)

        assert stat.total_tasks == 2
        assert stat.completed_tasks == 1
        assert stat.completion_percentage == pytest.approx(50)

    def test_reconcile_creates_missing_row(self, db_session, project):
        stat = StatisticsService(db_session).reconcile(project.id)

        assert stat.total_tasks == 0
        assert stat.completed_tasks == 0
        assert stat.overdue_tasks == 0
        assert stat.completion_percentage == 0
