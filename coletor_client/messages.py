SCAN_OK = "LEITURA OK"
NEW_BOX_OK = "NOVA CAIXA GERADA"
TASK_PAUSED = "Tarefa pausada."
TASK_FINISHED = "Tarefa encerrada com sucesso."
TASK_CANCELLED = "Tarefa cancelada com sucesso."
TASK_REFRESHED = "Dados da tarefa atualizados."

COMMUNICATION_ERROR = "Erro de comunicação"
UNKNOWN_ERROR = "Erro desconhecido"
PAUSE_FAILED = "Erro ao pausar"
FINISH_FAILED = "Erro ao encerrar"
CANCEL_FAILED = "Erro ao cancelar"
NEW_BOX_FAILED = "Erro ao gerar caixa"
START_FAILED = "Falha ao iniciar tarefa"
LIST_FAILED = "Falha na comunicação com o servidor."
LOGIN_FAILED = "Falha no login"
SESSION_DISCARDED = "Sessão da tarefa encerrada."

CONFIRM_FINISH_TITLE = "Confirmar Encerramento"
CONFIRM_FINISH_PROMPT = "Deseja realmente encerrar esta tarefa?"
CONFIRM_CANCEL_TITLE = "Confirmar Cancelamento"
CONFIRM_CANCEL_PROMPT = "Deseja realmente cancelar esta tarefa?"

SETTINGS_REQUIRED = "Por favor, preencha todos os campos."
SETTINGS_SAVED = "Configuração salva e validada com sucesso!"
SETTINGS_INVALID = "Erro ao validar configuração. Verifique os dados e tente novamente."
CREDENTIALS_REQUIRED = "Informe o código do funcionário e a senha."
TENANT_NOT_CONFIGURED = "Empresa não configurada. Acesse as configurações."
