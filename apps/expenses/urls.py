from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'expenses'

router = DefaultRouter()
router.register(r'', views.ExpenseViewSet, basename='expense')

urlpatterns = [
    # GET    /api/expenses/?trip=&category=&date_from=&date_to= - List expenses
    # POST   /api/expenses/       - Record expense
    # GET    /api/expenses/{id}/  - Expense detail
    # PATCH  /api/expenses/{id}/  - Edit expense (creator or trip owner)
    # DELETE /api/expenses/{id}/  - Delete expense (creator or trip owner)
    path('', include(router.urls)),
]
