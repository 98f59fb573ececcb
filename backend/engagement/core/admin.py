# engagement/core/admin.py
import logging
import secrets
from sqladmin import Admin, ModelView
from sqladmin.authentication import AuthenticationBackend
from fastapi import Request
from engagement.core.security import ADMIN_SCOPE, create_access_token, decode_access_token
from engagement.core.config import settings
from engagement.models.scoring import UserScore, ScoreHistory
from engagement.models.engagement import DailyEngagementStatus, UserBadgeStatus, Badge, UserBadge

logger = logging.getLogger(__name__)


# 1. Настройка авторизации в админке
class AdminAuth(AuthenticationBackend):
    async def login(self, request: Request) -> bool:
        form = await request.form()
        username, password = form.get("username", ""), form.get("password", "")

        expected = settings.security.ADMIN_PASSWORD
        if expected is None:
            logger.warning("Admin login rejected: ADMIN_PASSWORD is not configured")
            return False

        # compare_digest на str падает для не-ASCII
        if secrets.compare_digest(str(username).encode(), settings.security.ADMIN_USERNAME.encode()) and \
                secrets.compare_digest(str(password).encode(), expected.get_secret_value().encode()):
            token = create_access_token(settings.security.ADMIN_USERNAME, scope=ADMIN_SCOPE)
            request.session.update({"token": token})
            return True
        return False

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> bool:
        token = request.session.get("token")
        if not token:
            return False
        try:
            payload = decode_access_token(token)
        except ValueError:
            return False
        return payload.get("scope") == ADMIN_SCOPE

authentication_backend = AdminAuth(secret_key=settings.security.JWT_SECRET_KEY.get_secret_value())

# 2. Представления моделей (Views)

class BadgeAdmin(ModelView, model=Badge):
    column_list = [Badge.id, Badge.name, Badge.tier, Badge.icon]
    column_searchable_list = [Badge.name]
    form_columns = [Badge.name, Badge.description, Badge.tier, Badge.icon, Badge.criteria]
    icon = "fa-solid fa-award"

class UserBadgeAdmin(ModelView, model=UserBadge):
    column_list = [UserBadge.id, UserBadge.user_id, UserBadge.badge, UserBadge.earned_at]
    column_sortable_list = [UserBadge.earned_at]
    # Выданные бейджи не редактируются и не отзываются
    can_create = False
    can_edit = False
    can_delete = False
    icon = "fa-solid fa-medal"

class UserScoreAdmin(ModelView, model=UserScore):
    column_list = [UserScore.user_id, UserScore.total_score, UserScore.weekly_score,
                   UserScore.monthly_score, UserScore.updated_at]
    column_sortable_list = [UserScore.total_score, UserScore.updated_at]
    can_create = False
    can_edit = False
    icon = "fa-solid fa-ranking-star"

class ScoreHistoryAdmin(ModelView, model=ScoreHistory):
    column_list = [ScoreHistory.user_id, ScoreHistory.period, ScoreHistory.period_date, ScoreHistory.score]
    column_sortable_list = [ScoreHistory.period_date]
    can_create = False
    can_edit = False
    icon = "fa-solid fa-chart-line"

class DailyEngagementStatusAdmin(ModelView, model=DailyEngagementStatus):
    column_list = [DailyEngagementStatus.user_id, DailyEngagementStatus.date, DailyEngagementStatus.is_present,
                   DailyEngagementStatus.card_view_count, DailyEngagementStatus.mcq_attempt_count,
                   DailyEngagementStatus.mcq_accuracy]
    column_sortable_list = [DailyEngagementStatus.date]
    can_create = False
    can_edit = False
    icon = "fa-solid fa-calendar-check"

class UserBadgeStatusAdmin(ModelView, model=UserBadgeStatus):
    column_list = [UserBadgeStatus.user_id, UserBadgeStatus.current_badge,
                   UserBadgeStatus.days_active, UserBadgeStatus.last_calculated_at]
    can_create = False
    can_edit = False
    icon = "fa-solid fa-shield-halved"

# 3. Функция инициализации
def setup_admin(app, engine):
    admin = Admin(app, engine, authentication_backend=authentication_backend, title="Engagement Admin")

    admin.add_view(BadgeAdmin)
    admin.add_view(UserBadgeAdmin)
    admin.add_view(UserScoreAdmin)
    admin.add_view(ScoreHistoryAdmin)
    admin.add_view(DailyEngagementStatusAdmin)
    admin.add_view(UserBadgeStatusAdmin)
    return admin
