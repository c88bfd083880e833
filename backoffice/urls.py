"""
URL configuration for backoffice project.

Every business endpoint is a JSON API mounted under /api/.
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    # Django admin
    path('admin/', admin.site.urls),

    # Admissions app - leads, pipeline transitions, lead reports
    path('api/', include(('admissions.urls', 'admissions'), namespace='admissions')),

    # Fees app - admission fees, due collections, coordinator follow-ups
    path('api/', include(('fees.urls', 'fees'), namespace='fees')),

    # Finance app - bank ledger, income/expense register, summary
    path('api/', include(('finance.urls', 'finance'), namespace='finance')),
]
