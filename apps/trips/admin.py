from django.contrib import admin
from .models import Trip, TripMember


class TripMemberInline(admin.TabularInline):
    model = TripMember
    extra = 0
    fields = ['name', 'email', 'user', 'is_owner', 'joined_at']
    readonly_fields = ['joined_at']


@admin.register(Trip)
class TripAdmin(admin.ModelAdmin):
    list_display = ['name', 'owner', 'start_date', 'end_date', 'total_budget', 'created_at']
    list_filter = ['start_date', 'created_at']
    search_fields = ['name', 'description', 'owner__email']
    readonly_fields = ['id', 'created_at', 'updated_at']
    inlines = [TripMemberInline]

    fieldsets = (
        ('Trip', {
            'fields': ('id', 'name', 'description', 'owner', 'cover_image')
        }),
        ('Dates', {
            'fields': ('start_date', 'end_date')
        }),
        ('Budget', {
            'fields': ('total_budget', 'category_budgets')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )
