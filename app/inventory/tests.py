from decimal import Decimal

from django.test import override_settings

from core.errors import ConflictError, NotFoundError, ValidationError
from inventory import services
from inventory.models import Parcelle
from tests.base import BaseAppTestCase
from tests.factories import Factory


class ParcelleStateMachineTests(BaseAppTestCase):
    def setUp(self):
        self.lotissement = Factory.lotissement()
        self.parcelle = Factory.parcelle(lotissement=self.lotissement, plot_number="A1")

    def test_available_to_reserved(self):
        parcelle = services.transition_parcelle(
            self.parcelle.pk,
            from_statuses=[Parcelle.Status.AVAILABLE],
            to_status=Parcelle.Status.RESERVED,
        )
        self.assertEqual(parcelle.status, Parcelle.Status.RESERVED)

    def test_status_mismatch_raises_conflict_and_keeps_status(self):
        Parcelle.objects.filter(pk=self.parcelle.pk).update(status=Parcelle.Status.RESERVED)

        with self.assertRaises(ConflictError) as ctx:
            services.transition_parcelle(
                self.parcelle.pk,
                from_statuses=[Parcelle.Status.AVAILABLE],
                to_status=Parcelle.Status.RESERVED,
            )

        self.assertEqual(ctx.exception.payload["current_status"], Parcelle.Status.RESERVED)
        self.parcelle.refresh_from_db()
        self.assertEqual(self.parcelle.status, Parcelle.Status.RESERVED)

    def test_sold_is_terminal(self):
        Parcelle.objects.filter(pk=self.parcelle.pk).update(status=Parcelle.Status.SOLD)

        for target in (Parcelle.Status.AVAILABLE, Parcelle.Status.RESERVED):
            with self.assertRaises(ConflictError):
                services.transition_parcelle(
                    self.parcelle.pk,
                    from_statuses=[Parcelle.Status.SOLD],
                    to_status=target,
                )
        self.parcelle.refresh_from_db()
        self.assertEqual(self.parcelle.status, Parcelle.Status.SOLD)

    def test_unknown_parcelle_raises_not_found(self):
        with self.assertRaises(NotFoundError):
            services.transition_parcelle(
                999999,
                from_statuses=[Parcelle.Status.AVAILABLE],
                to_status=Parcelle.Status.RESERVED,
            )

    def test_deleted_parcelle_cannot_change_status(self):
        services.delete_parcelle(self.parcelle.pk)
        with self.assertRaises(NotFoundError):
            services.transition_parcelle(
                self.parcelle.pk,
                from_statuses=[Parcelle.Status.AVAILABLE],
                to_status=Parcelle.Status.RESERVED,
            )


class ParcelleGuardTests(BaseAppTestCase):
    def setUp(self):
        self.lotissement = Factory.lotissement()
        self.ilot = Factory.ilot(lotissement=self.lotissement, name="Îlot A", capacity=2)

    def _create(self, plot_number, **kwargs):
        kwargs.setdefault("area", "450")
        kwargs.setdefault("price", "4 500 000")
        return services.create_parcelle(self.lotissement, plot_number=plot_number, **kwargs)

    def test_created_parcelle_is_available(self):
        parcelle = self._create(" A12 ")
        self.assertEqual(parcelle.status, Parcelle.Status.AVAILABLE)
        self.assertEqual(parcelle.plot_number, "A12")
        self.assertEqual(parcelle.price, 4_500_000)
        self.assertEqual(parcelle.area, Decimal("450"))

    def test_plot_number_unique_case_insensitive(self):
        self._create("A12")
        with self.assertRaises(ValidationError) as ctx:
            self._create(" a12 ")
        self.assertEqual(ctx.exception.code, "duplicate_plot_number")
        self.assertEqual(Parcelle.objects.alive().filter(lotissement=self.lotissement).count(), 1)

    def test_same_plot_number_allowed_in_other_lotissement(self):
        self._create("A12")
        other = Factory.lotissement()
        parcelle = services.create_parcelle(other, plot_number="A12", area="300", price="1000000")
        self.assertEqual(parcelle.lotissement, other)

    def test_deleted_parcelle_frees_its_plot_number(self):
        first = self._create("A12")
        services.delete_parcelle(first.pk)
        second = self._create("a12")
        self.assertNotEqual(first.pk, second.pk)

    def test_restore_rechecks_plot_number(self):
        first = self._create("A12")
        services.delete_parcelle(first.pk)
        self._create("A12")
        with self.assertRaises(ValidationError):
            services.restore_parcelle(first.pk)
        first.refresh_from_db()
        self.assertIsNotNone(first.deleted_at)

    def test_restore_parcelle(self):
        parcelle = self._create("A12")
        services.delete_parcelle(parcelle.pk)
        restored = services.restore_parcelle(parcelle.pk)
        self.assertIsNone(restored.deleted_at)

    def test_capacity_is_enforced_on_create(self):
        self._create("A1", ilot=self.ilot.pk)
        self._create("A2", ilot=self.ilot.pk)
        with self.assertRaises(ValidationError) as ctx:
            self._create("A3", ilot=self.ilot.pk)
        self.assertEqual(ctx.exception.code, "ilot_capacity_exceeded")
        self.assertEqual(self.ilot.parcelles.filter(deleted_at__isnull=True).count(), 2)

    def test_capacity_is_enforced_on_reassignment(self):
        self._create("A1", ilot=self.ilot.pk)
        self._create("A2", ilot=self.ilot.pk)
        outsider = self._create("B1")

        with self.assertRaises(ValidationError):
            services.update_parcelle(outsider.pk, ilot=self.ilot.pk)
        outsider.refresh_from_db()
        self.assertIsNone(outsider.ilot_id)

    def test_editing_a_parcelle_in_a_full_ilot_excludes_itself(self):
        self._create("A1", ilot=self.ilot.pk)
        second = self._create("A2", ilot=self.ilot.pk)
        updated = services.update_parcelle(second.pk, ilot=self.ilot.pk, price=6_000_000)
        self.assertEqual(updated.price, 6_000_000)

    def test_deleted_parcelles_do_not_count_against_capacity(self):
        first = self._create("A1", ilot=self.ilot.pk)
        self._create("A2", ilot=self.ilot.pk)
        services.delete_parcelle(first.pk)
        third = self._create("A3", ilot=self.ilot.pk)
        self.assertEqual(third.ilot_id, self.ilot.pk)

    def test_unlimited_ilot(self):
        ilot = Factory.ilot(lotissement=self.lotissement, capacity=None)
        for n in range(5):
            self._create(f"U{n}", ilot=ilot.pk)
        self.assertEqual(ilot.parcelles.count(), 5)

    def test_ilot_from_other_lotissement_rejected(self):
        foreign = Factory.ilot(lotissement=Factory.lotissement())
        with self.assertRaises(ValidationError):
            self._create("A1", ilot=foreign.pk)

    def test_invalid_price_and_area(self):
        with self.assertRaises(ValidationError):
            self._create("A1", price="0")
        with self.assertRaises(ValidationError):
            self._create("A1", price="12.5")
        with self.assertRaises(ValidationError):
            self._create("A1", area="abc")
        with self.assertRaises(ValidationError):
            self._create("   ")


class ParcelleEditTests(BaseAppTestCase):
    def setUp(self):
        self.lotissement = Factory.lotissement()
        self.ilot = Factory.ilot(lotissement=self.lotissement)
        self.parcelle = Factory.parcelle(lotissement=self.lotissement, plot_number="C1")

    def test_status_is_not_editable(self):
        with self.assertRaises(ConflictError):
            services.update_parcelle(self.parcelle.pk, status=Parcelle.Status.SOLD)
        self.parcelle.refresh_from_db()
        self.assertEqual(self.parcelle.status, Parcelle.Status.AVAILABLE)

    def test_unchanged_status_is_accepted(self):
        updated = services.update_parcelle(self.parcelle.pk, status=Parcelle.Status.AVAILABLE, notes="Angle")
        self.assertEqual(updated.notes, "Angle")

    def test_sold_parcelle_keeps_its_ilot(self):
        Parcelle.objects.filter(pk=self.parcelle.pk).update(status=Parcelle.Status.SOLD)
        with self.assertRaises(ConflictError):
            services.update_parcelle(self.parcelle.pk, ilot=self.ilot.pk)

    def test_sold_parcelle_cannot_be_deleted(self):
        Parcelle.objects.filter(pk=self.parcelle.pk).update(status=Parcelle.Status.SOLD)
        with self.assertRaises(ConflictError):
            services.delete_parcelle(self.parcelle.pk)
        self.parcelle.refresh_from_db()
        self.assertIsNone(self.parcelle.deleted_at)

    def test_reserved_parcelle_cannot_be_deleted(self):
        Parcelle.objects.filter(pk=self.parcelle.pk).update(status=Parcelle.Status.RESERVED)
        with self.assertRaises(ConflictError) as ctx:
            services.delete_parcelle(self.parcelle.pk)
        self.assertEqual(ctx.exception.code, "parcelle_reserved")
        self.parcelle.refresh_from_db()
        self.assertIsNone(self.parcelle.deleted_at)

    def test_renaming_to_existing_plot_number(self):
        Factory.parcelle(lotissement=self.lotissement, plot_number="C2")
        with self.assertRaises(ValidationError):
            services.update_parcelle(self.parcelle.pk, plot_number="c2")

    def test_unknown_field_rejected(self):
        with self.assertRaises(ValidationError):
            services.update_parcelle(self.parcelle.pk, lotissement=123)


class BulkCreateTests(BaseAppTestCase):
    def setUp(self):
        self.lotissement = Factory.lotissement()

    def test_numbers_follow_prefix_and_start(self):
        parcelles = services.create_parcelles_bulk(
            self.lotissement, count=3, start_number=7, prefix="B", area="300", price="2000000"
        )
        self.assertEqual([p.plot_number for p in parcelles], ["B7", "B8", "B9"])
        self.assertTrue(all(p.status == Parcelle.Status.AVAILABLE for p in parcelles))

    def test_all_or_nothing_on_duplicate(self):
        Factory.parcelle(lotissement=self.lotissement, plot_number="b2")
        with self.assertRaises(ValidationError):
            services.create_parcelles_bulk(
                self.lotissement, count=3, start_number=1, prefix="B", area="300", price="2000000"
            )
        self.assertEqual(Parcelle.objects.filter(lotissement=self.lotissement).count(), 1)

    def test_capacity_counts_the_whole_batch(self):
        ilot = Factory.ilot(lotissement=self.lotissement, capacity=4)
        Factory.parcelle(lotissement=self.lotissement, ilot=ilot)
        with self.assertRaises(ValidationError):
            services.create_parcelles_bulk(
                self.lotissement, count=4, prefix="D", area="300", price="2000000", ilot=ilot.pk
            )
        self.assertEqual(ilot.parcelles.count(), 1)

    def test_count_must_be_positive(self):
        with self.assertRaises(ValidationError):
            services.create_parcelles_bulk(self.lotissement, count=0, area="300", price="2000000")


class IlotTests(BaseAppTestCase):
    def setUp(self):
        self.lotissement = Factory.lotissement()

    def test_create_ilot(self):
        ilot = services.create_ilot(self.lotissement, name=" Îlot 7 ", capacity="12")
        self.assertEqual(ilot.name, "Îlot 7")
        self.assertEqual(ilot.capacity, 12)

    def test_blank_capacity_is_unlimited(self):
        ilot = services.create_ilot(self.lotissement, name="Îlot 8", capacity="")
        self.assertIsNone(ilot.capacity)
        self.assertFalse(ilot.is_limited)

    def test_negative_capacity_rejected(self):
        with self.assertRaises(ValidationError):
            services.create_ilot(self.lotissement, name="Îlot 9", capacity=-1)

    def test_capacity_cannot_drop_below_current_count(self):
        ilot = Factory.ilot(lotissement=self.lotissement, capacity=5)
        Factory.parcelle(lotissement=self.lotissement, ilot=ilot)
        Factory.parcelle(lotissement=self.lotissement, ilot=ilot)

        with self.assertRaises(ValidationError):
            services.update_ilot(ilot.pk, capacity=1)
        self.assertEqual(services.update_ilot(ilot.pk, capacity=2).capacity, 2)

    def test_ilots_with_stats_count_live_parcelles(self):
        ilot = Factory.ilot(lotissement=self.lotissement, name="A")
        empty = Factory.ilot(lotissement=self.lotissement, name="B")
        Factory.parcelle(lotissement=self.lotissement, ilot=ilot)
        Factory.parcelle(lotissement=self.lotissement, ilot=ilot, status=Parcelle.Status.SOLD)
        Factory.parcelle(lotissement=self.lotissement, ilot=ilot, status=Parcelle.Status.RESERVED)
        trashed = Factory.parcelle(lotissement=self.lotissement, ilot=ilot)
        services.delete_parcelle(trashed.pk)

        first, second = services.ilots_with_stats(self.lotissement)
        self.assertEqual(first, ilot)
        self.assertEqual(first.parcelles_count, 3)
        self.assertEqual(first.parcelles_vendues, 1)
        self.assertEqual(first.parcelles_disponibles, 1)
        self.assertEqual(second, empty)
        self.assertEqual(second.parcelles_count, 0)

    def test_delete_ilot_detaches_its_parcelles(self):
        ilot = Factory.ilot(lotissement=self.lotissement, capacity=2)
        parcelle = Factory.parcelle(lotissement=self.lotissement, ilot=ilot)

        services.delete_ilot(ilot.pk)

        parcelle.refresh_from_db()
        self.assertIsNone(parcelle.ilot_id)
        self.assertEqual(list(services.deleted_ilots(self.lotissement)), [ilot])
        self.assertEqual(list(services.ilots_with_stats(self.lotissement)), [])
        with self.assertRaises(NotFoundError):
            services.update_parcelle(parcelle.pk, ilot=ilot.pk)

    def test_ilot_with_sold_parcelle_cannot_be_deleted(self):
        ilot = Factory.ilot(lotissement=self.lotissement)
        sold = Factory.parcelle(lotissement=self.lotissement, ilot=ilot, status=Parcelle.Status.SOLD)
        other = Factory.parcelle(lotissement=self.lotissement, ilot=ilot)

        with self.assertRaises(ConflictError):
            services.delete_ilot(ilot.pk)

        ilot.refresh_from_db()
        other.refresh_from_db()
        self.assertIsNone(ilot.deleted_at)
        self.assertEqual(other.ilot_id, ilot.pk)
        self.assertEqual(sold.ilot_id, ilot.pk)

    def test_restore_ilot(self):
        ilot = Factory.ilot(lotissement=self.lotissement)
        services.delete_ilot(ilot.pk)

        restored = services.restore_ilot(ilot.pk)

        self.assertIsNone(restored.deleted_at)
        with self.assertRaises(NotFoundError):
            services.restore_ilot(ilot.pk)
        with self.assertRaises(NotFoundError):
            services.delete_ilot("abc")


class InventoryAPITests(BaseAppTestCase):
    def setUp(self):
        self.lotissement = Factory.lotissement()

    def test_create_parcelle(self):
        response = self.post_json(
            f"/api/inventaire/lotissements/{self.lotissement.pk}/parcelles",
            {"plot_number": "E1", "area": "520,5", "price": 3_000_000},
        )
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(data["status"], Parcelle.Status.AVAILABLE)
        self.assertEqual(Decimal(data["area"]), Decimal("520.5"))

    def test_duplicate_plot_number_maps_to_400(self):
        Factory.parcelle(lotissement=self.lotissement, plot_number="E1")
        response = self.post_json(
            f"/api/inventaire/lotissements/{self.lotissement.pk}/parcelles",
            {"plot_number": "e1", "area": "500", "price": 3_000_000},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "duplicate_plot_number")

    def test_delete_sold_parcelle_maps_to_409(self):
        parcelle = Factory.parcelle(lotissement=self.lotissement, status=Parcelle.Status.SOLD)
        response = self.client.delete(f"/api/inventaire/parcelles/{parcelle.pk}")
        self.assertEqual(response.status_code, 409)

    def test_patch_and_restore(self):
        parcelle = Factory.parcelle(lotissement=self.lotissement)
        response = self.patch_json(f"/api/inventaire/parcelles/{parcelle.pk}", {"price": "7 000 000"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["price"], 7_000_000)

        self.client.delete(f"/api/inventaire/parcelles/{parcelle.pk}")
        response = self.post_json(f"/api/inventaire/parcelles/{parcelle.pk}/restaurer")
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["deleted"])

    def test_ilot_list_delete_and_restore(self):
        ilot = Factory.ilot(lotissement=self.lotissement)
        Factory.parcelle(lotissement=self.lotissement, ilot=ilot, status=Parcelle.Status.SOLD)
        Factory.parcelle(lotissement=self.lotissement, ilot=ilot)

        response = self.client.get(f"/api/inventaire/lotissements/{self.lotissement.pk}/ilots")
        self.assertEqual(response.status_code, 200)
        item = response.json()["items"][0]
        self.assertEqual(item["parcelles_count"], 2)
        self.assertEqual(item["parcelles_vendues"], 1)
        self.assertEqual(item["parcelles_disponibles"], 1)

        response = self.client.delete(f"/api/inventaire/ilots/{ilot.pk}")
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["code"], "ilot_has_sold_parcelles")

        empty = Factory.ilot(lotissement=self.lotissement)
        response = self.client.delete(f"/api/inventaire/ilots/{empty.pk}")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["deleted"])

        response = self.client.get(f"/api/inventaire/lotissements/{self.lotissement.pk}/ilots/corbeille")
        self.assertEqual([i["id"] for i in response.json()["items"]], [empty.pk])

        response = self.post_json(f"/api/inventaire/ilots/{empty.pk}/restaurer")
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["deleted"])

    def test_unknown_lotissement_maps_to_404(self):
        response = self.post_json(
            "/api/inventaire/lotissements/999999/parcelles",
            {"plot_number": "E1", "area": "500", "price": 3_000_000},
        )
        self.assertEqual(response.status_code, 404)

    def test_invalid_json(self):
        response = self.client.post(
            f"/api/inventaire/lotissements/{self.lotissement.pk}/parcelles",
            data="{not json",
            content_type="application/json",
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "invalid_json")

    @override_settings(LOTISSEMENTS_API_TOKEN="secret")
    def test_token_is_required_when_configured(self):
        path = f"/api/inventaire/lotissements/{self.lotissement.pk}/ilots"
        response = self.post_json(path, {"name": "Îlot A"})
        self.assertEqual(response.status_code, 401)

        response = self.post_json(path, {"name": "Îlot A"}, HTTP_AUTHORIZATION="Bearer secret")
        self.assertEqual(response.status_code, 201)
