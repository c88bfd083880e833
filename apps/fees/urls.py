# fees/urls.py

from django.urls import path
from . import views

urlpatterns = [
    # Admission fees
    path('fees/', views.fee_collection, name='fee_collection'),
    path('fees/status/<uuid:lead_pk>/', views.fee_status_for_lead, name='fee_status_for_lead'),
    path('fees/<uuid:pk>/approve/', views.fee_approve, name='fee_approve'),
    path('fees/<uuid:pk>/reject/', views.fee_reject, name='fee_reject'),
    path('fees/<uuid:pk>/cancel/', views.fee_cancel, name='fee_cancel'),

    # Due collections
    path('due-collections/', views.due_collection_collection, name='due_collection_collection'),
    path('due-collections/<uuid:pk>/approve/', views.due_collection_approve, name='due_collection_approve'),
    path('due-collections/<uuid:pk>/reject/', views.due_collection_reject, name='due_collection_reject'),

    # Coordinator
    path('coordinator/dues/', views.coordinator_dues, name='coordinator_dues'),
    path('coordinator/notifications/', views.coordinator_notifications, name='coordinator_notifications'),
    path('coordinator/stats/', views.coordinator_stats, name='coordinator_stats'),
    path('coordinator/follow-ups/', views.coordinator_add_follow_up, name='coordinator_add_follow_up'),
    path('coordinator/fees/<uuid:pk>/history/', views.coordinator_fee_history, name='coordinator_fee_history'),
    path('coordinator/fees/<uuid:pk>/payment-date/', views.coordinator_update_payment_date, name='coordinator_update_payment_date'),
]
