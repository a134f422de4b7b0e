from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="StockRecord",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("product_id", models.CharField(max_length=64)),
                ("branch_id", models.CharField(max_length=32)),
                ("quantity_on_hand", models.IntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "ops_stock_records",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("product_id", "branch_id"),
                        name="uq_stock_product_branch",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(quantity_on_hand__gte=0),
                        name="ck_stock_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="LoyaltyAccount",
            fields=[
                (
                    "account_id",
                    models.CharField(max_length=64, primary_key=True, serialize=False),
                ),
                (
                    "point_balance",
                    models.DecimalField(decimal_places=2, default=0, max_digits=14),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "ops_loyalty_accounts",
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(point_balance__gte=0),
                        name="ck_loyalty_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="SequenceCounter",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("branch_id", models.CharField(max_length=32)),
                ("category_code", models.CharField(max_length=16)),
                ("last_value", models.BigIntegerField()),
            ],
            options={
                "db_table": "ops_sequence_counters",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("branch_id", "category_code"),
                        name="uq_counter_branch_category",
                    ),
                ],
            },
        ),
    ]
