from django.urls import path
from . import views

app_name = 'bills'

urlpatterns = [
    # GET    /api/bills/                        - List bills (filters + pagination)
    # POST   /api/bills/                        - Create bill
    path('', views.bill_collection, name='bill-list'),

    # Admin reports
    path('stats/', views.bill_stats, name='bill-stats'),
    path('monthly/', views.monthly_revenue, name='monthly-revenue'),

    # Lookups
    path('receipt/<int:receipt_no>/', views.bill_by_receipt_no, name='bill-by-receipt'),
    path('member/<int:ward>/<int:house>/', views.member_bills, name='member-bills'),

    # GET/PATCH/DELETE /api/bills/{id}/         - Single bill
    path('<uuid:bill_id>/', views.bill_detail, name='bill-detail'),
    path('<uuid:bill_id>/cancel/', views.cancel, name='bill-cancel'),
    path('<uuid:bill_id>/receipt/', views.receipt, name='bill-receipt'),
]
