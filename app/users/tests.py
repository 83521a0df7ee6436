from tests.base import BaseAppTestCase
from users.models import RoleCode


class UserRoleTests(BaseAppTestCase):
    def test_sellers(self):
        for role in (RoleCode.ADMIN, RoleCode.GESTIONNAIRE, RoleCode.COMMERCIAL):
            self.assertTrue(self.make_user(role=role).can_sell)

    def test_accountant_cannot_sell(self):
        self.assertFalse(self.make_user(role=RoleCode.COMPTABLE).can_sell)

    def test_inactive_user_cannot_sell(self):
        self.assertFalse(self.make_user(role=RoleCode.COMMERCIAL, is_active=False).can_sell)
