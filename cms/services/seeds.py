"""
Default site content.

Used by the ``seed_content`` command to populate an empty database and by
the public API as fallback when a section cannot be read.
"""
from __future__ import annotations

SITE = {
    'hero_title': 'Tratamento de Burnout, Ansiedade e Problemas Relacionais',
    'hero_subtitle': (
        'Na Clínica Freud, ajudamos adultos, jovens e casais a recuperar o equilíbrio '
        'emocional com psicólogos e psiquiatras experientes'
    ),
    'hero_cta_label': 'Agendar Consulta',
    'contact_phone': '+351 916 649 284',
    'contact_email': 'consulta@clinicafreud.pt',
    'address': 'Avenida 5 de Outubro, 122, 8º Esq., 1050-061 Lisboa',
}

SERVICES = [
    {
        'title': 'Psicoterapia e Psicologia Clínica',
        'description': 'Apoio individual, avaliação psicológica completa e relatórios para escola e trabalho',
        'icon': 'heart',
    },
    {
        'title': 'Psicologia Infantojuvenil (-16 anos)',
        'description': 'Acompanhamento emocional e escolar, avaliação psicológica, orientação vocacional',
        'icon': 'baby',
    },
    {
        'title': 'Terapia de Casal e de Família',
        'description': 'Superar conflitos e crises conjugais, melhorar comunicação e confiança',
        'icon': 'users',
    },
    {
        'title': 'Psiquiatria',
        'description': 'Consultas, incluindo pedopsiquiatria, diagnóstico especializado e prescrição',
        'icon': 'stethoscope',
    },
    {
        'title': 'Supervisão e Intervisão Clínica',
        'description': 'Supervisão individual e em grupo, discussão de casos clínicos',
        'icon': 'brain',
    },
    {
        'title': 'Serviços Vários',
        'description': 'Reabilitação cognitiva, terapia ocupacional, terapia da fala, nutrição clínica',
        'icon': 'utensils-crossed',
    },
]

ABOUT_FEATURES = [
    {'title': 'Perturbações do Humor', 'description': '', 'icon': ''},
    {'title': 'Perturbações da Ansiedade', 'description': '', 'icon': ''},
    {'title': 'Perturbações da Personalidade', 'description': '', 'icon': ''},
    {'title': 'Perturbações Infantojuvenis', 'description': '', 'icon': ''},
    {'title': 'LGBT+ Friendly', 'description': '', 'icon': ''},
    {'title': 'Perturbações Sexuais', 'description': '', 'icon': ''},
    {'title': 'Perturbações Alimentares', 'description': '', 'icon': ''},
    {'title': 'Dificuldades Várias', 'description': '', 'icon': ''},
]

FAQS = [
    {
        'question': 'Como posso marcar uma consulta?',
        'answer': 'Através do formulário de marcação no site, por telefone ou por email.',
    },
    {
        'question': 'Qual é o horário de funcionamento?',
        'answer': 'De segunda a sábado, entre as 08h e as 21h.',
    },
    {
        'question': 'As consultas podem ser online?',
        'answer': 'Sim, a maioria das especialidades está disponível em consulta presencial ou online.',
    },
]


def as_records(rows: list) -> list:
    """Seed rows shaped like serialized records, with dense 1-based orders."""
    return [dict(row, id=None, order=position, image_url='') for position, row in enumerate(rows, start=1)]
