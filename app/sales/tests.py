from datetime import date, timedelta
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase, override_settings
from django.utils import timezone

from core.errors import (
    ConflictError,
    DuplicateBuyerError,
    MissingBuyerError,
    NotFoundError,
    ValidationError,
)
from inventory.models import Parcelle
from sales import buyers, reservations, services
from sales.models import Acquereur, ActivityLog, Echeance, Reservation, Vente
from tests.base import BaseAppTestCase
from tests.factories import Factory
from users.models import RoleCode


class InstallmentPlanTests(SimpleTestCase):
    def test_even_split(self):
        self.assertEqual(
            services.compute_installment_plan(1_000_000, Vente.PaymentType.INSTALLMENT, 100_000, 9),
            (100_000, 100_000, 9),
        )

    def test_ceiling_split(self):
        self.assertEqual(
            services.compute_installment_plan(1_000_000, Vente.PaymentType.INSTALLMENT, 0, 7),
            (0, 142_858, 7),
        )

    def test_plan_covers_financed_amount(self):
        down, monthly, n = services.compute_installment_plan(2_345_679, "echelonne", "345 679", "11")
        self.assertGreaterEqual(monthly * n, 2_345_679 - down)
        self.assertLess((monthly - 1) * n, 2_345_679 - down)

    def test_cash_has_no_plan(self):
        self.assertEqual(
            services.compute_installment_plan(1_000_000, Vente.PaymentType.CASH, 100_000, 9),
            (None, None, None),
        )

    @override_settings(SALE_DEFAULT_INSTALLMENTS=12)
    def test_defaults_for_unreadable_input(self):
        self.assertEqual(
            services.compute_installment_plan(1_200_000, "echelonne", "abc", "xyz"),
            (0, 100_000, 12),
        )
        self.assertEqual(
            services.compute_installment_plan(1_200_000, "echelonne", None, 0),
            (0, 100_000, 12),
        )
        self.assertEqual(
            services.compute_installment_plan(1_200_000, "echelonne", "", -3),
            (0, 100_000, 12),
        )

    def test_invalid_down_payment(self):
        with self.assertRaises(ValidationError):
            services.compute_installment_plan(1_000_000, "echelonne", -1, 10)
        with self.assertRaises(ValidationError):
            services.compute_installment_plan(1_000_000, "echelonne", 1_000_001, 10)

    def test_full_down_payment_is_not_an_installment_sale(self):
        with self.assertRaises(ValidationError) as ctx:
            services.compute_installment_plan(5_000_000, "echelonne", 5_000_000, 12)
        self.assertEqual(ctx.exception.code, "nothing_to_finance")

    def test_count_shrinks_when_last_months_would_be_empty(self):
        self.assertEqual(
            services.compute_installment_plan(100, "echelonne", 0, 60),
            (0, 2, 50),
        )


class BuyerRegistryTests(BaseAppTestCase):
    def setUp(self):
        self.existing = buyers.register_buyer(
            {"name": "Jean Kouassi", "phone": "07 00 11 22 33", "cni_number": "CI-0042"}
        )

    def test_phone_is_stored_as_digits(self):
        self.assertEqual(self.existing.phone, "0700112233")

    def test_duplicate_phone_with_different_name(self):
        with self.assertRaises(DuplicateBuyerError) as ctx:
            buyers.register_buyer({"name": "Awa Traoré", "phone": "+0700-11-22-33"})
        self.assertEqual(ctx.exception.field, "phone")
        self.assertEqual(ctx.exception.buyer, self.existing)
        self.assertEqual(ctx.exception.payload["acquereur_id"], self.existing.pk)
        self.assertEqual(Acquereur.objects.count(), 1)

    def test_duplicate_name_is_case_insensitive_and_trimmed(self):
        with self.assertRaises(DuplicateBuyerError) as ctx:
            buyers.register_buyer({"name": "  jean   KOUASSI "})
        self.assertEqual(ctx.exception.field, "name")

    def test_duplicate_cni(self):
        with self.assertRaises(DuplicateBuyerError) as ctx:
            buyers.register_buyer({"name": "Autre", "cni_number": "ci-0042"})
        self.assertEqual(ctx.exception.field, "cni_number")

    def test_cni_punctuation_is_ignored(self):
        self.assertEqual(self.existing.cni_number, "CI0042")
        with self.assertRaises(DuplicateBuyerError) as ctx:
            buyers.register_buyer({"name": "Autre", "cni_number": "ci 00.42"})
        self.assertEqual(ctx.exception.field, "cni_number")

    def test_name_reported_before_phone(self):
        with self.assertRaises(DuplicateBuyerError) as ctx:
            buyers.register_buyer({"name": "Jean Kouassi", "phone": "0700112233"})
        self.assertEqual(ctx.exception.field, "name")

    def test_empty_phone_and_cni_never_match(self):
        Factory.acquereur(name="Sans téléphone", phone="", cni_number="")
        buyer = buyers.register_buyer({"name": "Nouveau", "phone": "", "cni_number": " "})
        self.assertEqual(buyer.name, "Nouveau")

    def test_resolve_existing_buyer_skips_duplicate_check(self):
        self.assertEqual(buyers.resolve_buyer(self.existing.pk), self.existing)
        self.assertEqual(buyers.resolve_buyer(self.existing), self.existing)

    def test_resolve_missing_buyer(self):
        for ref in (None, "", {"name": "  "}):
            with self.assertRaises(MissingBuyerError):
                buyers.resolve_buyer(ref)
        with self.assertRaises(NotFoundError):
            buyers.resolve_buyer(999999)


class ReservationTests(BaseAppTestCase):
    def setUp(self):
        self.lotissement = Factory.lotissement()
        self.parcelle = Factory.parcelle(lotissement=self.lotissement, plot_number="R1")
        self.buyer = Factory.acquereur(name="Marie Koffi")

    def test_reserve_available_parcelle(self):
        reservation = reservations.create_reservation(
            self.parcelle.pk,
            self.buyer.pk,
            deposit_amount="500 000",
            payment_method="mobile_money",
            validity_days=15,
        )

        self.parcelle.refresh_from_db()
        self.assertEqual(self.parcelle.status, Parcelle.Status.RESERVED)
        self.assertEqual(reservation.status, Reservation.Status.ACTIVE)
        self.assertEqual(reservation.deposit_amount, 500_000)
        self.assertEqual(reservation.expiry_date, timezone.localdate() + timedelta(days=15))
        self.assertTrue(ActivityLog.objects.filter(entity_type="reservation", entity_id=str(reservation.pk)).exists())

    @override_settings(RESERVATION_DEFAULT_VALIDITY_DAYS=30)
    def test_validity_defaults_to_30_days(self):
        for value in (None, "", "abc", 0, -4):
            parcelle = Factory.parcelle(lotissement=self.lotissement)
            reservation = reservations.create_reservation(parcelle.pk, self.buyer, validity_days=value)
            self.assertEqual(reservation.validity_days, 30)
            self.assertEqual(reservation.expiry_date, timezone.localdate() + timedelta(days=30))

    def test_blank_deposit_is_zero(self):
        reservation = reservations.create_reservation(self.parcelle.pk, self.buyer, deposit_amount="")
        self.assertEqual(reservation.deposit_amount, 0)

    def test_invalid_deposit(self):
        for value in ("-5", "douze"):
            with self.assertRaises(ValidationError):
                reservations.create_reservation(self.parcelle.pk, self.buyer, deposit_amount=value)
        self.parcelle.refresh_from_db()
        self.assertEqual(self.parcelle.status, Parcelle.Status.AVAILABLE)

    def test_reserved_parcelle_cannot_be_reserved_again(self):
        reservations.create_reservation(self.parcelle.pk, self.buyer)
        with self.assertRaises(ConflictError):
            reservations.create_reservation(self.parcelle.pk, Factory.acquereur())
        self.assertEqual(Reservation.objects.filter(parcelle=self.parcelle).count(), 1)

    def test_missing_buyer(self):
        with self.assertRaises(MissingBuyerError):
            reservations.create_reservation(self.parcelle.pk, None)
        self.parcelle.refresh_from_db()
        self.assertEqual(self.parcelle.status, Parcelle.Status.AVAILABLE)

    def test_inline_duplicate_buyer_leaves_parcelle_available(self):
        with self.assertRaises(DuplicateBuyerError):
            reservations.create_reservation(
                self.parcelle.pk,
                {"name": "Autre Nom", "phone": self.buyer.phone},
            )
        self.parcelle.refresh_from_db()
        self.assertEqual(self.parcelle.status, Parcelle.Status.AVAILABLE)

    def test_inline_buyer_is_created(self):
        reservation = reservations.create_reservation(
            self.parcelle.pk,
            {"name": "Paul Yao", "phone": "05 05 05 05 05"},
        )
        self.assertEqual(reservation.acquereur.name, "Paul Yao")
        self.assertEqual(reservation.acquereur.phone, "0505050505")

    def test_cancel_keeps_deposit_and_frees_parcelle(self):
        reservation = reservations.create_reservation(self.parcelle.pk, self.buyer, deposit_amount=250_000)

        cancelled = reservations.cancel_reservation(reservation.pk)

        self.parcelle.refresh_from_db()
        self.assertEqual(self.parcelle.status, Parcelle.Status.AVAILABLE)
        self.assertEqual(cancelled.status, Reservation.Status.CANCELLED)
        self.assertEqual(cancelled.deposit_amount, 250_000)

    def test_cancel_twice_conflicts(self):
        reservation = reservations.create_reservation(self.parcelle.pk, self.buyer)
        reservations.cancel_reservation(reservation.pk)
        with self.assertRaises(ConflictError):
            reservations.cancel_reservation(reservation.pk)

    def test_cancel_unknown_reservation(self):
        with self.assertRaises(NotFoundError):
            reservations.cancel_reservation(999999)

    def test_is_expired_is_inclusive_of_expiry_day(self):
        reservation = Factory.reservation(
            parcelle=self.parcelle,
            acquereur=self.buyer,
            reservation_date=date(2025, 1, 1),
            validity_days=30,
            expiry_date=date(2025, 1, 31),
        )
        self.assertFalse(reservations.is_expired(reservation, today=date(2025, 1, 31)))
        self.assertTrue(reservations.is_expired(reservation, today=date(2025, 2, 1)))

    def test_expired_reservations_are_listed_not_released(self):
        today = timezone.localdate()
        expired = Factory.reservation(
            parcelle=self.parcelle,
            acquereur=self.buyer,
            reservation_date=today - timedelta(days=40),
            expiry_date=today - timedelta(days=10),
        )
        Factory.reservation(parcelle=Factory.parcelle(lotissement=self.lotissement), acquereur=self.buyer)

        self.assertEqual(list(reservations.expired_reservations()), [expired])

        out = StringIO()
        call_command("expired_reservations", stdout=out)
        self.assertIn("1 réservation(s) expirée(s)", out.getvalue())
        expired.refresh_from_db()
        self.assertEqual(expired.status, Reservation.Status.ACTIVE)


class SaleTests(BaseAppTestCase):
    def setUp(self):
        self.lotissement = Factory.lotissement()
        self.parcelle = Factory.parcelle(lotissement=self.lotissement, plot_number="S1", price=1_000_000)
        self.buyer = Factory.acquereur(name="Ibrahim Coulibaly")
        self.seller = self.make_user(role=RoleCode.COMMERCIAL)

    def test_cash_sale_of_available_parcelle(self):
        vente = services.create_sale(
            self.parcelle.pk,
            self.buyer.pk,
            total_price="1 000 000",
            payment_type="comptant",
            payment_method="virement",
            sold_by=self.seller.pk,
        )

        self.parcelle.refresh_from_db()
        self.assertEqual(self.parcelle.status, Parcelle.Status.SOLD)
        self.assertIsNone(vente.down_payment)
        self.assertIsNone(vente.monthly_payment)
        self.assertIsNone(vente.total_installments)
        self.assertEqual(vente.status, Vente.Status.SETTLED)
        self.assertFalse(vente.echeances.exists())

    def test_reserve_then_sell_converts_reservation(self):
        reservation = reservations.create_reservation(self.parcelle.pk, self.buyer, deposit_amount=100_000)

        vente = services.create_sale(
            self.parcelle.pk,
            self.buyer,
            total_price=1_000_000,
            payment_type="echelonne",
            down_payment=100_000,
            total_installments=9,
            reservation_id=reservation.pk,
        )

        reservation.refresh_from_db()
        self.parcelle.refresh_from_db()
        self.assertEqual(Vente.objects.filter(parcelle=self.parcelle).count(), 1)
        self.assertEqual(reservation.status, Reservation.Status.CONVERTED)
        self.assertEqual(reservation.converted_vente, vente)
        self.assertEqual(self.parcelle.status, Parcelle.Status.SOLD)
        self.assertEqual(vente.monthly_payment, 100_000)

    def test_installment_schedule(self):
        vente = services.create_sale(
            self.parcelle.pk,
            self.buyer,
            total_price=1_000_000,
            payment_type="echelonne",
            down_payment=0,
            total_installments=7,
            sale_date="2025-01-31",
        )

        echeances = list(vente.echeances.order_by("due_date"))
        self.assertEqual(len(echeances), 7)
        self.assertEqual([e.amount for e in echeances[:-1]], [142_858] * 6)
        self.assertEqual(echeances[-1].amount, 1_000_000 - 6 * 142_858)
        self.assertEqual(sum(e.amount for e in echeances), 1_000_000)
        self.assertEqual(echeances[0].due_date, date(2025, 2, 28))
        self.assertEqual(echeances[1].due_date, date(2025, 3, 31))

    def test_sold_parcelle_cannot_be_sold_again(self):
        services.create_sale(self.parcelle.pk, self.buyer, total_price=1_000_000)
        with self.assertRaises(ConflictError):
            services.create_sale(self.parcelle.pk, Factory.acquereur(), total_price=1_000_000)
        self.assertEqual(Vente.objects.filter(parcelle=self.parcelle).count(), 1)

    def test_failed_sale_rolls_back_inline_buyer(self):
        services.create_sale(self.parcelle.pk, self.buyer, total_price=1_000_000)
        buyers_before = Acquereur.objects.count()
        with self.assertRaises(ConflictError):
            services.create_sale(self.parcelle.pk, {"name": "Nouvel Acheteur"}, total_price=1_000_000)
        self.assertEqual(Acquereur.objects.count(), buyers_before)

    def test_reserved_parcelle_can_be_sold_without_reservation_id(self):
        reservation = reservations.create_reservation(self.parcelle.pk, self.buyer)
        vente = services.create_sale(self.parcelle.pk, self.buyer, total_price=1_000_000)
        reservation.refresh_from_db()
        self.assertEqual(reservation.status, Reservation.Status.CONVERTED)
        self.assertEqual(reservation.converted_vente, vente)

    def test_direct_sale_leaves_no_active_reservation_behind(self):
        reservation = reservations.create_reservation(self.parcelle.pk, self.buyer)
        services.create_sale(self.parcelle.pk, Factory.acquereur(), total_price=1_000_000)

        self.assertFalse(
            Reservation.objects.filter(parcelle=self.parcelle, status=Reservation.Status.ACTIVE).exists()
        )
        with self.assertRaises(ConflictError):
            reservations.cancel_reservation(reservation.pk)
        self.assertEqual(list(reservations.expired_reservations(date(2099, 1, 1))), [])

    def test_full_down_payment_installment_sale_rejected(self):
        with self.assertRaises(ValidationError):
            services.create_sale(
                self.parcelle.pk,
                self.buyer,
                total_price=5_000_000,
                payment_type="echelonne",
                down_payment=5_000_000,
                total_installments=12,
            )
        self.parcelle.refresh_from_db()
        self.assertEqual(self.parcelle.status, Parcelle.Status.AVAILABLE)
        self.assertFalse(Echeance.objects.exists())

    def test_schedule_has_no_empty_installments(self):
        vente = services.create_sale(
            self.parcelle.pk,
            self.buyer,
            total_price=100,
            payment_type="echelonne",
            total_installments=60,
        )
        amounts = list(vente.echeances.values_list("amount", flat=True))
        self.assertEqual(vente.total_installments, 50)
        self.assertEqual(len(amounts), 50)
        self.assertEqual(sum(amounts), 100)
        self.assertNotIn(0, amounts)

    def test_reservation_for_other_parcelle_rejected(self):
        other = Factory.parcelle(lotissement=self.lotissement)
        reservation = reservations.create_reservation(other.pk, self.buyer)
        with self.assertRaises(ValidationError):
            services.create_sale(
                self.parcelle.pk, self.buyer, total_price=1_000_000, reservation_id=reservation.pk
            )
        self.parcelle.refresh_from_db()
        self.assertEqual(self.parcelle.status, Parcelle.Status.AVAILABLE)

    def test_cancelled_reservation_cannot_be_converted(self):
        reservation = reservations.create_reservation(self.parcelle.pk, self.buyer)
        reservations.cancel_reservation(reservation.pk)
        with self.assertRaises(ConflictError):
            services.create_sale(
                self.parcelle.pk, self.buyer, total_price=1_000_000, reservation_id=reservation.pk
            )

    def test_invalid_inputs(self):
        for price in (0, "-10", "abc", "1000.5"):
            with self.assertRaises(ValidationError):
                services.create_sale(self.parcelle.pk, self.buyer, total_price=price)
        with self.assertRaises(ValidationError):
            services.create_sale(self.parcelle.pk, self.buyer, total_price=1_000, payment_type="credit")
        with self.assertRaises(MissingBuyerError):
            services.create_sale(self.parcelle.pk, None, total_price=1_000)
        self.parcelle.refresh_from_db()
        self.assertEqual(self.parcelle.status, Parcelle.Status.AVAILABLE)

    def test_seller_must_be_allowed_to_sell(self):
        accountant = self.make_user(role=RoleCode.COMPTABLE)
        with self.assertRaises(ValidationError):
            services.create_sale(self.parcelle.pk, self.buyer, total_price=1_000_000, sold_by=accountant)

    def test_pay_echeance(self):
        vente = services.create_sale(
            self.parcelle.pk,
            self.buyer,
            total_price=300_000,
            payment_type="echelonne",
            total_installments=2,
        )
        first, second = vente.echeances.order_by("due_date")

        paid = services.pay_echeance(first.pk, paid_date="2025-03-01", receipt_number=" R-1 ")
        self.assertEqual(paid.status, Echeance.Status.PAID)
        self.assertEqual(paid.paid_amount, 150_000)
        self.assertEqual(paid.receipt_number, "R-1")
        vente.refresh_from_db()
        self.assertEqual(vente.paid_installments, 1)
        self.assertEqual(vente.status, Vente.Status.IN_PROGRESS)

        with self.assertRaises(ConflictError):
            services.pay_echeance(first.pk)

        services.pay_echeance(second.pk, paid_amount="150 000")
        vente.refresh_from_db()
        self.assertEqual(vente.paid_installments, 2)
        self.assertEqual(vente.status, Vente.Status.SETTLED)

    def test_pay_echeance_rejects_unreadable_amount(self):
        vente = services.create_sale(
            self.parcelle.pk, self.buyer, total_price=300_000, payment_type="echelonne", total_installments=2
        )
        echeance = vente.echeances.order_by("due_date").first()
        for amount in ("abc", -5):
            with self.assertRaises(ValidationError) as ctx:
                services.pay_echeance(echeance.pk, paid_amount=amount)
            self.assertEqual(ctx.exception.code, "invalid_paid_amount")
        echeance.refresh_from_db()
        self.assertEqual(echeance.status, Echeance.Status.PENDING)


class EcheanceFollowUpTests(BaseAppTestCase):
    def setUp(self):
        self.lotissement = Factory.lotissement(name="Les Palmiers")
        parcelle = Factory.parcelle(lotissement=self.lotissement, plot_number="P7")
        self.vente = services.create_sale(
            parcelle.pk,
            Factory.acquereur(name="Aya Konan"),
            total_price=400_000,
            payment_type="echelonne",
            total_installments=4,
            sale_date="2025-01-15",
        )
        # Due dates: 2025-02-15, 03-15, 04-15, 05-15.
        self.first, self.second, self.third, self.fourth = self.vente.echeances.order_by("due_date")

    def test_overdue_is_strictly_before_today(self):
        overdue = services.overdue_echeances(today=date(2025, 3, 15))
        self.assertEqual(list(overdue), [self.first])

    def test_paid_echeances_are_not_overdue(self):
        services.pay_echeance(self.first.pk)
        self.assertEqual(list(services.overdue_echeances(today=date(2025, 3, 16))), [self.second])

    def test_upcoming_window_is_inclusive(self):
        upcoming = services.upcoming_echeances(1, today=date(2025, 3, 15))
        self.assertEqual(list(upcoming), [self.second, self.third])
        upcoming = services.upcoming_echeances("2", today=date(2025, 3, 16))
        self.assertEqual(list(upcoming), [self.third, self.fourth])

    def test_filter_by_lotissement(self):
        other = Factory.lotissement()
        self.assertEqual(list(services.overdue_echeances(date(2025, 6, 1), lotissement=other.pk)), [])
        self.assertEqual(len(services.overdue_echeances(date(2025, 6, 1), lotissement=self.lotissement.pk)), 4)

    def test_overdue_echeances_command(self):
        out = StringIO()
        call_command("overdue_echeances", "--date", "2025-04-01", stdout=out)
        output = out.getvalue()
        self.assertIn("lot P7 (Les Palmiers)", output)
        self.assertIn("Aya Konan", output)
        self.assertIn("2 échéance(s) en retard, total 200000 FCFA.", output)

        out = StringIO()
        call_command("overdue_echeances", "--date", "2025-04-01", "--upcoming", "1", stdout=out)
        self.assertIn("1 échéance(s) à venir", out.getvalue())

        with self.assertRaises(CommandError):
            call_command("overdue_echeances", "--date", "avril", stdout=StringIO())

    def test_api(self):
        response = self.client.get("/api/ventes/echeances/en-retard", {"date": "2025-03-20"})
        self.assertEqual(response.status_code, 200)
        items = response.json()["items"]
        self.assertEqual([i["id"] for i in items], [self.first.pk, self.second.pk])
        self.assertEqual(items[0]["parcelle"]["plot_number"], "P7")
        self.assertEqual(items[0]["acquereur"]["name"], "Aya Konan")

        response = self.client.get("/api/ventes/echeances/a-venir", {"date": "2025-03-20", "mois": 2})
        self.assertEqual([i["id"] for i in response.json()["items"]], [self.third.pk, self.fourth.pk])

        response = self.client.get("/api/ventes/echeances/en-retard", {"date": "hier"})
        self.assertEqual(response.status_code, 400)


class SalesAPITests(BaseAppTestCase):
    def setUp(self):
        self.lotissement = Factory.lotissement()
        self.parcelle = Factory.parcelle(lotissement=self.lotissement)
        self.user = self.login_as(self.make_user(role=RoleCode.COMMERCIAL))

    def test_reservation_sale_flow(self):
        response = self.post_json(
            f"/api/ventes/parcelles/{self.parcelle.pk}/reservations",
            {"acquereur": {"name": "Fatou Bamba", "phone": "01 02 03 04 05"}, "deposit_amount": 200000},
        )
        self.assertEqual(response.status_code, 201)
        reservation = response.json()
        self.assertEqual(reservation["status"], "active")
        self.assertFalse(reservation["is_expired"])

        response = self.post_json(
            f"/api/ventes/parcelles/{self.parcelle.pk}/ventes",
            {
                "acquereur_id": reservation["acquereur_id"],
                "total_price": 1_000_000,
                "payment_type": "echelonne",
                "down_payment": 100_000,
                "total_installments": 9,
                "reservation_id": reservation["id"],
            },
        )
        self.assertEqual(response.status_code, 201)
        vente = response.json()
        self.assertEqual(vente["monthly_payment"], 100_000)
        self.assertEqual(len(vente["echeances"]), 9)
        self.assertEqual(vente["sold_by"], self.user.pk)

        response = self.post_json(f"/api/ventes/echeances/{vente['echeances'][0]['id']}/payer")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "paid")

    def test_duplicate_buyer_maps_to_409(self):
        existing = Factory.acquereur(name="Fatou Bamba", phone="0102030405")
        response = self.post_json("/api/ventes/acquereurs", {"name": "Autre", "phone": "01-02-03-04-05"})
        self.assertEqual(response.status_code, 409)
        payload = response.json()
        self.assertEqual(payload["code"], "duplicate_buyer")
        self.assertEqual(payload["acquereur_id"], existing.pk)
        self.assertEqual(payload["field"], "phone")

    def test_missing_buyer_maps_to_400(self):
        response = self.post_json(f"/api/ventes/parcelles/{self.parcelle.pk}/reservations", {})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "missing_buyer")

    def test_conflict_maps_to_409(self):
        buyer = Factory.acquereur()
        Parcelle.objects.filter(pk=self.parcelle.pk).update(status=Parcelle.Status.SOLD)
        response = self.post_json(
            f"/api/ventes/parcelles/{self.parcelle.pk}/reservations",
            {"acquereur_id": buyer.pk},
        )
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["current_status"], Parcelle.Status.SOLD)

    def test_cancel_reservation(self):
        reservation = Factory.reservation(parcelle=self.parcelle, acquereur=Factory.acquereur())
        Parcelle.objects.filter(pk=self.parcelle.pk).update(status=Parcelle.Status.RESERVED)
        response = self.post_json(f"/api/ventes/reservations/{reservation.pk}/annuler")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "cancelled")

    def test_get_not_allowed(self):
        response = self.client.get(f"/api/ventes/parcelles/{self.parcelle.pk}/ventes")
        self.assertEqual(response.status_code, 405)
