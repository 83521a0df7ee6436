from datetime import date
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase

from finance.commissions import (
    ALL_PERIODS,
    NO_MANAGEMENT_TYPE,
    commission_amount,
    compute_commission_report,
    payment_commission,
)
from finance.models import ManagementType, Owner, Payment, Property, Tenant
from finance.services import load_commission_report
from tests.base import BaseAppTestCase
from tests.factories import Factory


class CommissionEngineTests(SimpleTestCase):
    """Engine runs on unsaved instances: no database access."""

    def setUp(self):
        self.mandate = ManagementType(id=1, name="Gestion complète", percentage=Decimal("10.00"))
        self.owner = Owner(id=1, name="Koné", management_type=self.mandate)
        self.prop = Property(id=10, title="Villa Riviera", owner=self.owner)
        self.tenant = Tenant(id=100, name="Diallo", property=self.prop)
        self.owners = [self.owner]
        self.properties = [self.prop]
        self.tenants = [self.tenant]

    def _payment(self, pk, amount=500_000, paid_date=date(2025, 3, 10), status=Payment.Status.PAID, tenant=None):
        return Payment(
            id=pk,
            tenant=tenant or self.tenant,
            amount=amount,
            due_date=paid_date or date(2025, 3, 1),
            paid_date=paid_date,
            status=status,
        )

    def _report(self, payments, start=None, end=None):
        return compute_commission_report(payments, self.owners, self.properties, self.tenants, start, end)

    def test_ten_percent_of_500000(self):
        report = self._report([self._payment(1)])

        self.assertEqual(report.payment_count, 1)
        self.assertEqual(report.commissions[0].commission_amount, 50_000)
        self.assertEqual(report.commissions[0].management_type_name, "Gestion complète")
        self.assertEqual(report.by_owner[0].total_commission, 50_000)
        self.assertEqual(report.by_owner[0].total_rent, 500_000)
        self.assertEqual(report.total_commission, 50_000)

    def test_only_paid_payments_inside_period_count(self):
        payments = [
            self._payment(1, paid_date=date(2025, 3, 1)),
            self._payment(2, paid_date=date(2025, 3, 31)),
            self._payment(3, paid_date=date(2025, 2, 28)),
            self._payment(4, paid_date=date(2025, 4, 1)),
            self._payment(5, status=Payment.Status.PENDING),
            self._payment(6, status=Payment.Status.LATE),
            self._payment(7, paid_date=None),
        ]

        report = self._report(payments, date(2025, 3, 1), date(2025, 3, 31))

        self.assertEqual([line.payment_id for line in report.commissions], [2, 1])
        self.assertEqual(report.total_rent, 1_000_000)

    def test_out_of_range_payment_changes_nothing(self):
        base = [self._payment(1)]
        with_outsider = base + [self._payment(2, amount=9_999_999, paid_date=date(2024, 1, 1))]
        start, end = date(2025, 1, 1), date(2025, 12, 31)
        self.assertEqual(self._report(base, start, end), self._report(with_outsider, start, end))

    def test_report_is_idempotent(self):
        payments = [self._payment(1), self._payment(2, amount=120_000, paid_date=date(2025, 3, 2))]
        self.assertEqual(self._report(payments), self._report(payments))

    def test_broken_chains_are_skipped(self):
        orphan_tenant = Tenant(id=101, name="Sans bien", property=None)
        ownerless = Property(id=11, title="Sans propriétaire", owner=None)
        tenant_of_ownerless = Tenant(id=102, name="Yao", property=ownerless)
        self.tenants += [orphan_tenant, tenant_of_ownerless]
        self.properties.append(ownerless)
        unknown_tenant = Tenant(id=999, name="Inconnu", property=self.prop)

        report = self._report(
            [
                self._payment(1, tenant=orphan_tenant),
                self._payment(2, tenant=tenant_of_ownerless),
                self._payment(3, tenant=unknown_tenant),
                self._payment(4),
            ]
        )

        self.assertEqual([line.payment_id for line in report.commissions], [4])

    def test_owner_without_management_type(self):
        owner = Owner(id=2, name="Sans mandat", management_type=None)
        prop = Property(id=20, title="Studio", owner=owner)
        tenant = Tenant(id=200, name="Bamba", property=prop)
        self.owners.append(owner)
        self.properties.append(prop)
        self.tenants.append(tenant)

        report = self._report([self._payment(1, tenant=tenant)])

        self.assertEqual(report.commissions[0].commission_amount, 0)
        self.assertEqual(report.commissions[0].management_type_name, NO_MANAGEMENT_TYPE)
        self.assertEqual(report.by_owner[0].commission_percentage, Decimal("0"))

    def test_rounding_is_half_up(self):
        self.assertEqual(commission_amount(1_004, Decimal("12.5")), 126)
        self.assertEqual(commission_amount(1_003, Decimal("12.5")), 125)
        self.assertEqual(commission_amount(1, Decimal("2.5")), 0)
        self.assertEqual(commission_amount(500_000, None), 0)

    def test_sorting(self):
        small_mandate = ManagementType(id=2, name="Encaissement", percentage=Decimal("5"))
        other = Owner(id=2, name="Touré", management_type=small_mandate)
        other_prop = Property(id=20, title="Duplex", owner=other)
        other_tenant = Tenant(id=200, name="Kouamé", property=other_prop)
        self.owners.append(other)
        self.properties.append(other_prop)
        self.tenants.append(other_tenant)

        report = self._report(
            [
                self._payment(1, tenant=other_tenant, amount=2_000_000, paid_date=date(2025, 3, 5)),
                self._payment(2, amount=100_000, paid_date=date(2025, 3, 5)),
                self._payment(3, amount=100_000, paid_date=date(2025, 3, 20)),
            ]
        )

        # Ex aequo du 5 mars : ordre d'entrée conservé.
        self.assertEqual([line.payment_id for line in report.commissions], [3, 1, 2])
        self.assertEqual([s.owner_name for s in report.by_owner], ["Touré", "Koné"])
        self.assertEqual(report.by_owner[0].total_commission, 100_000)
        self.assertEqual(report.by_owner[1].payment_count, 2)

    def test_period_label(self):
        self.assertEqual(self._report([]).period, ALL_PERIODS)
        self.assertEqual(self._report([], date(2025, 3, 1)).period, ALL_PERIODS)
        self.assertEqual(
            self._report([], date(2025, 3, 1), date(2025, 3, 31)).period,
            "2025-03-01 - 2025-03-31",
        )

    def test_as_dict_is_json_ready(self):
        data = self._report([self._payment(1)], date(2025, 3, 1), date(2025, 3, 31)).as_dict()
        self.assertEqual(data["start_date"], "2025-03-01")
        self.assertEqual(data["commissions"][0]["payment_date"], "2025-03-10")
        self.assertEqual(data["commissions"][0]["commission_percentage"], "10.00")
        self.assertEqual(data["by_owner"][0]["total_commission"], 50_000)

    def test_payment_commission_net_amount(self):
        result = payment_commission(self._payment(1), self.owners, self.properties, self.tenants)
        self.assertEqual(result["commission_amount"], 50_000)
        self.assertEqual(result["net_amount"], 450_000)
        self.assertEqual(result["owner_name"], "Koné")

    def test_payment_commission_without_owner(self):
        orphan = Tenant(id=101, name="Sans bien", property=None)
        self.tenants.append(orphan)
        self.assertIsNone(
            payment_commission(self._payment(1, tenant=orphan), self.owners, self.properties, self.tenants)
        )


class CommissionReportLoadingTests(BaseAppTestCase):
    def setUp(self):
        mandate = Factory.management_type(name="Gestion complète", percentage=Decimal("10.00"))
        self.owner = Factory.owner(name="Koné", management_type=mandate)
        self.prop = Factory.property(owner=self.owner)
        self.tenant = Factory.tenant(property=self.prop)
        self.payment = Factory.payment(tenant=self.tenant, paid_date=date(2025, 3, 10))
        Factory.payment(tenant=self.tenant, paid_date=date(2025, 2, 10))
        Factory.payment(tenant=self.tenant, paid_date=None, status=Payment.Status.LATE, due_date=date(2025, 3, 1))
        Factory.payment(tenant=Factory.tenant(property=None), paid_date=date(2025, 3, 12))

    def test_report_reads_one_snapshot(self):
        with self.assertNumQueries(1):
            report = load_commission_report(date(2025, 3, 1), date(2025, 3, 31))

        self.assertEqual(report.payment_count, 1)
        self.assertEqual(report.total_commission, 50_000)
        self.assertEqual(report.by_owner[0].owner_id, self.owner.pk)

    def test_all_periods(self):
        report = load_commission_report()
        self.assertEqual(report.payment_count, 2)
        self.assertEqual(report.total_rent, 1_000_000)

    def test_commission_api(self):
        response = self.client.get("/api/finances/commissions", {"debut": "2025-03-01", "fin": "2025-03-31"})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["period"], "2025-03-01 - 2025-03-31")
        self.assertEqual(data["total_commission"], 50_000)
        self.assertEqual(data["by_owner"][0]["owner_name"], "Koné")

    def test_commission_api_rejects_bad_dates(self):
        response = self.client.get("/api/finances/commissions", {"debut": "mars"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "invalid_date")

        response = self.client.get("/api/finances/commissions", {"debut": "2025-04-01", "fin": "2025-03-01"})
        self.assertEqual(response.status_code, 400)

    def test_payment_commission_api(self):
        response = self.client.get(f"/api/finances/paiements/{self.payment.pk}/commission")
        self.assertEqual(response.status_code, 200)
        commission = response.json()["commission"]
        self.assertEqual(commission["commission_amount"], 50_000)
        self.assertEqual(commission["net_amount"], 450_000)

        response = self.client.get("/api/finances/paiements/999999/commission")
        self.assertEqual(response.status_code, 404)

    def test_commission_report_command(self):
        out = StringIO()
        call_command("commission_report", "--year", "2025", "--month", "3", stdout=out)
        output = out.getvalue()
        self.assertIn("2025-03-01 - 2025-03-31", output)
        self.assertIn("Koné", output)
        self.assertIn("50,000", output)

    def test_commission_report_command_rejects_reversed_period(self):
        with self.assertRaises(CommandError):
            call_command("commission_report", "--start", "2025-04-01", "--end", "2025-03-01", stdout=StringIO())
