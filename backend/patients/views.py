"""
HTTP 入口。View 只做三件事：取参数 → 调 service → 序列化。

所有业务异常直接往上抛，由 unified_exception_handler 统一格式化。
"""

from django.http import JsonResponse
from rest_framework.views import APIView

from . import services
from .demographics import all_code_sets
from .exceptions import ValidationError
from .intake import parse_create_payload
from .serializers import serialize_patient, serialize_similar_patient, serialize_temporary_patient


class PatientCreateView(APIView):
    """POST /api/v1/patients/ - Register a patient (409 on suspected duplicate unless bypassed)"""

    def post(self, request):
        data = parse_create_payload(request.data)
        patient = services.create_patient(data)
        return JsonResponse({'data': serialize_patient(patient)}, status=201)


class SimilarPatientsView(APIView):
    """GET /api/v1/patients/similar/?firstName=&lastName=&dateOfBirth=&sex="""

    def get(self, request):
        params = request.query_params
        matches = services.find_similar_patients(
            first_name=params.get('firstName'),
            last_name=params.get('lastName'),
            date_of_birth=params.get('dateOfBirth'),
            sex=params.get('sex'),
        )
        return JsonResponse({'data': [serialize_similar_patient(m) for m in matches]})


class PatientDetailView(APIView):
    """GET /api/v1/patients/<patient_id>/"""

    def get(self, request, patient_id):
        patient = services.get_patient(patient_id)
        return JsonResponse({'data': serialize_patient(patient)})


class TemporaryPatientCreateView(APIView):
    """POST /api/v1/patients/temporary/ - Placeholder record for an unidentified patient"""

    def post(self, request):
        body = request.data
        temp = services.create_temporary_patient(
            reason=body.get('reason'),
            first_name=body.get('firstName'),
            last_name=body.get('lastName'),
            date_of_birth=body.get('dateOfBirth'),
            sex=body.get('sex'),
            created_by=body.get('createdBy', ''),
        )
        return JsonResponse({'data': serialize_temporary_patient(temp)}, status=201)


class TemporaryPatientMergeView(APIView):
    """POST /api/v1/patients/temporary/<temp_id>/merge/ - body: {patientId, mergedBy}"""

    def post(self, request, temp_id):
        patient_id = request.data.get('patientId')
        if not patient_id:
            raise ValidationError(
                message='patientId is required',
                code='PATIENT_ID_REQUIRED',
            )
        temp = services.merge_temporary_patient(
            temp_id,
            patient_id,
            merged_by=request.data.get('mergedBy', ''),
        )
        return JsonResponse({'data': serialize_temporary_patient(temp)})


class DemographicsCodesView(APIView):
    """GET /api/v1/demographics/codes/ - USCDI coded value sets"""

    def get(self, request):
        return JsonResponse({'data': all_code_sets()})
