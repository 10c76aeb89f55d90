from django.db import models
from accounts.models import User, BaseModel


class TopupRecord(models.Model):
    METHOD_CHOICES = (
        ("bank", "Bank slip"),
        ("gift", "TrueMoney gift link"),
    )

    # rows outlive their user, they anchor replay protection
    user = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name="topups"
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    method = models.CharField(max_length=10, choices=METHOD_CHOICES)
    # slip reference, unique so one slip credits once; gift topups leave it empty
    transaction_id = models.CharField(max_length=100, unique=True, null=True, blank=True)
    slip_time = models.DateTimeField(null=True, blank=True)
    sender = models.JSONField(null=True, blank=True)
    receiver = models.JSONField(null=True, blank=True)
    note = models.CharField(max_length=200, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.user_id} +{self.amount} ({self.method})"


class RedeemedLink(BaseModel):
    STATUS_CHOICES = (
        ("pending", "Pending"),
        ("success", "Success"),
        ("fail", "Fail"),
    )

    # a link is claimed once, whatever the outcome
    link = models.CharField(max_length=255, unique=True)
    user = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name="redeemed_links"
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="pending")
    message = models.CharField(max_length=255, blank=True)

    def __str__(self):
        return f"{self.link} ({self.status})"
