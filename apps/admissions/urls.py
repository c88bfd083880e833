# admissions/urls.py

from django.urls import path
from . import views

urlpatterns = [
    path('leads/', views.lead_collection, name='lead_collection'),
    path('leads/bulk/', views.lead_bulk_import, name='lead_bulk_import'),
    path('leads/bulk-assign/', views.lead_bulk_assign, name='lead_bulk_assign'),
    path('leads/report/', views.lead_report, name='lead_report'),
    path('leads/follow-up-notifications/', views.lead_follow_up_notifications, name='lead_follow_up_notifications'),
    path('leads/<uuid:pk>/assign/', views.lead_assign, name='lead_assign'),
    path('leads/<uuid:pk>/history/', views.lead_history, name='lead_history'),
    path('leads/<uuid:pk>/status/', views.lead_status, name='lead_status'),
    path('leads/<uuid:pk>/undo-admission/', views.lead_undo_admission, name='lead_undo_admission'),
]
