from django.urls import path
from .views import (
    DemographicsCodesView,
    PatientCreateView,
    PatientDetailView,
    SimilarPatientsView,
    TemporaryPatientCreateView,
    TemporaryPatientMergeView,
)

urlpatterns = [
    path('patients/', PatientCreateView.as_view(), name='patient-create'),
    path('patients/similar/', SimilarPatientsView.as_view(), name='patient-similar'),
    path('patients/temporary/', TemporaryPatientCreateView.as_view(), name='temporary-patient-create'),
    path('patients/temporary/<uuid:temp_id>/merge/', TemporaryPatientMergeView.as_view(), name='temporary-patient-merge'),
    path('patients/<uuid:patient_id>/', PatientDetailView.as_view(), name='patient-detail'),
    path('demographics/codes/', DemographicsCodesView.as_view(), name='demographics-codes'),
]
