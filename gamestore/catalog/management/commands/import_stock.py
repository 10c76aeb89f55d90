import csv

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from catalog.models import Product, StockEntry


class Command(BaseCommand):
    help = "Bulk-load stock units for a product from a CSV of username,password rows"

    def add_arguments(self, parser):
        parser.add_argument("product_id", type=int)
        parser.add_argument("csv_path")
        parser.add_argument(
            "--skip-header",
            action="store_true",
            help="Ignore the first row of the file",
        )
        parser.add_argument("--batch-size", type=int, default=500)

    def handle(self, *args, **options):
        try:
            product = Product.objects.get(id=options["product_id"])
        except Product.DoesNotExist:
            raise CommandError(f"Product {options['product_id']} does not exist")

        try:
            with open(options["csv_path"], newline="", encoding="utf-8") as f:
                rows = list(csv.reader(f))
        except OSError as e:
            raise CommandError(f"Cannot read {options['csv_path']}: {e}")

        if options["skip_header"]:
            rows = rows[1:]

        entries = []
        skipped = 0
        for line_no, row in enumerate(rows, start=1):
            if len(row) < 2 or not row[0].strip() or not row[1].strip():
                skipped += 1
                self.stderr.write(f"line {line_no}: expected username,password, skipped")
                continue
            entries.append(
                StockEntry(product=product, username=row[0].strip(), password=row[1].strip())
            )

        with transaction.atomic():
            StockEntry.objects.bulk_create(entries, batch_size=options["batch_size"])

        self.stdout.write(
            self.style.SUCCESS(
                f"{len(entries)} stock unit(s) added to '{product.name}'"
                + (f", {skipped} row(s) skipped" if skipped else "")
            )
        )
