from django.contrib import admin
from .models import Expense


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ['title', 'trip', 'category', 'amount', 'paid_by', 'date']
    list_filter = ['category', 'date']
    search_fields = ['title', 'trip__name', 'paid_by']
    readonly_fields = ['id', 'created_at']
    raw_id_fields = ['trip', 'created_by']
