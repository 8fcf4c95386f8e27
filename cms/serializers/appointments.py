from collections.abc import Mapping

from rest_framework import serializers

from cms.models import AppointmentRequest
from cms.serializers.content import clean_text

# Keys posted by the Portuguese booking form
FORM_ALIASES = {
    'nome': 'name',
    'telefone': 'phone',
    'tipoConsulta': 'consultation_type',
    'preferenciaData': 'preferred_date',
    'preferenciaHora': 'preferred_time',
    'mensagem': 'message',
}


class AppointmentRequestSerializer(serializers.ModelSerializer):
    class Meta:
        model = AppointmentRequest
        fields = (
            'id', 'name', 'email', 'phone', 'consultation_type',
            'preferred_date', 'preferred_time', 'message', 'status', 'created_at',
        )
        read_only_fields = ('id', 'status', 'created_at')

    def to_internal_value(self, data):
        if isinstance(data, Mapping):
            data = data.dict() if hasattr(data, 'dict') else dict(data)
            for alias, name in FORM_ALIASES.items():
                if alias in data and not data.get(name):
                    data[name] = data.pop(alias)
            # The form sends an empty string when no date was picked
            if data.get('preferred_date') == '':
                data.pop('preferred_date')
        return super().to_internal_value(data)

    def validate(self, attrs):
        for name in ('name', 'phone', 'consultation_type', 'preferred_time', 'message'):
            if name in attrs:
                attrs[name] = clean_text(attrs[name])
        if len(attrs.get('name', '')) < 2:
            raise serializers.ValidationError({'name': 'O nome deve ter pelo menos 2 caracteres'})
        return attrs


class AppointmentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c for c, _ in AppointmentRequest.STATUS_CHOICES])
