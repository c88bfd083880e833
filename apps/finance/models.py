# finance/models.py

from django.db import models
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.utils import timezone
from decimal import Decimal
import logging

from utils.models import BaseModel

logger = logging.getLogger(__name__)


# =============================================================================
# ACCOUNT BALANCE (SINGLETON)
# =============================================================================

class AccountBalance(models.Model):
    """
    The organisation's cash position: bank balance and petty cash.

    Singleton pattern - always pk=1. Mutated only by
    finance.services.BankLedgerService under select_for_update().
    """

    SINGLETON_PK = 1

    id = models.PositiveSmallIntegerField(primary_key=True, default=SINGLETON_PK, editable=False)
    bank_balance = models.DecimalField(
        "Bank Balance",
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="May go negative; withdrawals mirror the bank statement"
    )
    petty_cash = models.DecimalField(
        "Petty Cash",
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00')
    )
    last_updated = models.DateTimeField("Last Updated", default=timezone.now)
    updated_by_id = models.CharField("Updated By ID", max_length=50, null=True, blank=True)

    class Meta:
        verbose_name = "Account Balance"
        verbose_name_plural = "Account Balance"

    # -------------------------------------------------------------------------
    # SINGLETON PATTERN METHODS
    # -------------------------------------------------------------------------

    @classmethod
    def get_instance(cls):
        """Get or create the singleton, materialised at zero."""
        instance, created = cls.objects.get_or_create(
            pk=cls.SINGLETON_PK,
            defaults={
                'bank_balance': Decimal('0.00'),
                'petty_cash': Decimal('0.00'),
            }
        )
        if created:
            logger.info("Account balance initialised at zero")
        return instance

    @classmethod
    def get_locked(cls):
        """Singleton row locked for update; call inside transaction.atomic()."""
        cls.get_instance()
        return cls.objects.select_for_update().get(pk=cls.SINGLETON_PK)

    def save(self, *args, **kwargs):
        """Ensure only one instance exists (singleton pattern)"""
        self.pk = self.SINGLETON_PK
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        """Prevent deletion of the singleton instance"""
        raise ValidationError("The account balance cannot be deleted")

    def __str__(self):
        return f"Bank {self.bank_balance} / Petty cash {self.petty_cash}"


# =============================================================================
# BANK TRANSACTION
# =============================================================================

class BankTransaction(BaseModel):
    """
    Immutable audit row for a bank deposit or withdrawal.

    Deleting one does not touch AccountBalance; operators post a
    compensating transaction instead.
    """

    TYPE_DEPOSIT = 'deposit'
    TYPE_WITHDRAW = 'withdraw'
    TRANSACTION_TYPE_CHOICES = [
        (TYPE_DEPOSIT, 'Deposit'),
        (TYPE_WITHDRAW, 'Withdraw'),
    ]

    transaction_type = models.CharField(
        "Type",
        max_length=10,
        choices=TRANSACTION_TYPE_CHOICES,
        db_index=True
    )
    date = models.DateField("Date", default=timezone.localdate, db_index=True)

    # Deposits
    deposit_from = models.CharField("Deposit From", max_length=100, blank=True)
    deposit_from_other = models.CharField("Deposit From (Other)", max_length=200, blank=True)

    # Withdrawals
    withdraw_purpose = models.CharField("Withdraw Purpose", max_length=100, blank=True)
    withdraw_purpose_other = models.CharField("Withdraw Purpose (Other)", max_length=200, blank=True)

    amount = models.DecimalField(
        "Amount",
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    notes = models.TextField("Notes", blank=True)

    balance_after = models.DecimalField("Bank Balance After", max_digits=14, decimal_places=2)
    petty_cash_after = models.DecimalField(
        "Petty Cash After",
        max_digits=14,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Only recorded when petty cash moved"
    )
    recorded_by_id = models.CharField("Recorded By", max_length=50, db_index=True)

    class Meta:
        verbose_name = "Bank Transaction"
        verbose_name_plural = "Bank Transactions"
        ordering = ['-date', '-created_at']
        indexes = [
            models.Index(fields=['transaction_type', 'date'], name='finance_bank_type_date_idx'),
        ]

    def __str__(self):
        return f"{self.get_transaction_type_display()} {self.amount} on {self.date}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Bank transactions are immutable once recorded")
        super().save(*args, **kwargs)

    @property
    def counterparty(self):
        if self.transaction_type == self.TYPE_DEPOSIT:
            return self.deposit_from_other or self.deposit_from
        return self.withdraw_purpose_other or self.withdraw_purpose


# =============================================================================
# INCOME / EXPENSE REGISTER
# =============================================================================

class Income(BaseModel):
    """
    Recognised income. System rows reference the fee or due collection
    that produced them; MANUAL rows are entered by accountants.
    """

    REF_ADMISSION_FEE = 'ADMISSION_FEE'
    REF_DUE_COLLECTION = 'DUE_COLLECTION'
    REF_MANUAL = 'MANUAL'
    REF_TYPE_CHOICES = [
        (REF_ADMISSION_FEE, 'Admission Fee'),
        (REF_DUE_COLLECTION, 'Due Collection'),
        (REF_MANUAL, 'Manual'),
    ]

    SOURCE_ADMISSION_FEE = 'Admission Fee'
    SOURCE_DUE_COLLECTION = 'Due Collection'

    date = models.DateField("Date", db_index=True)
    source = models.CharField("Source", max_length=100, db_index=True)
    amount = models.DecimalField(
        "Amount",
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    ref_type = models.CharField(
        "Reference Type",
        max_length=20,
        choices=REF_TYPE_CHOICES,
        default=REF_MANUAL,
        db_index=True
    )
    ref_id = models.UUIDField("Reference ID", null=True, blank=True)
    added_by_id = models.CharField("Added By", max_length=50)
    note = models.TextField("Note", blank=True)

    class Meta:
        verbose_name = "Income"
        verbose_name_plural = "Income"
        ordering = ['-date', '-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['ref_type', 'ref_id'],
                condition=~models.Q(ref_type='MANUAL'),
                name='unique_income_per_reference',
            ),
        ]

    def __str__(self):
        return f"{self.source} {self.amount} on {self.date}"

    @property
    def is_system_generated(self):
        return self.ref_type != self.REF_MANUAL


class Expense(BaseModel):
    """Manually recorded expense."""

    date = models.DateField("Date", db_index=True)
    purpose = models.CharField("Purpose", max_length=200)
    amount = models.DecimalField(
        "Amount",
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    added_by_id = models.CharField("Added By", max_length=50)
    note = models.TextField("Note", blank=True)

    class Meta:
        verbose_name = "Expense"
        verbose_name_plural = "Expenses"
        ordering = ['-date', '-created_at']

    def __str__(self):
        return f"{self.purpose} {self.amount} on {self.date}"
