from __future__ import annotations

import logging
import threading
from tkinter import messagebox

import customtkinter as ctk

from coletor_client.apis import SessionApi, TaskApi, TenantApi
from coletor_client.config import AppSettings, ConfigurationError
from coletor_client.http import HttpClient
from coletor_client.logging_utils import configure_logging
from coletor_client.models import Task
from coletor_client.services import ColetorService
from coletor_client.session import ActionResult, SessionState, TaskSession
from coletor_client.storage import SettingsStore
from coletor_client.workflow import ColetorWorkflow, WorkflowOutcome

logger = logging.getLogger(__name__)

ERROR_COLOR = "#d14343"
SUCCESS_COLOR = "#2e7d32"


class MainWindow(ctk.CTk):
	def __init__(self, workflow: ColetorWorkflow, refocus_delay_ms: int):
		super().__init__()
		self._workflow = workflow
		self.title("Coletor - Execução de Tarefas")
		self.geometry("520x760")
		self.minsize(420, 600)

		self._status_label = ctk.CTkLabel(self, text="Não conectado")
		self._status_label.pack(anchor="w", padx=16, pady=(16, 8))

		self._request_progress_label = ctk.CTkLabel(self, text="")
		self._request_progress_label.pack(anchor="w", padx=16, pady=(0, 4))

		self._request_progress_bar = ctk.CTkProgressBar(self)
		self._request_progress_bar.pack(fill="x", padx=16, pady=(0, 8))
		self._request_progress_bar.set(0)

		self._progress_active = False
		self._progress_job: str | None = None
		self._progress_total_seconds = max(1, int(self._workflow.service.request_timeout_seconds))
		self._progress_elapsed_seconds = 0.0
		self._progress_update_interval_seconds = 0.1
		self._set_progress_idle()

		self._content = ctk.CTkFrame(self)
		self._content.pack(fill="both", expand=True, padx=16, pady=(0, 16))

		self._refocus_delay_ms = refocus_delay_ms
		self._refocus_job: str | None = None
		self._screen_generation = 0
		self._busy = False
		self._action_buttons: list[ctk.CTkButton] = []
		self._message_label: ctk.CTkLabel | None = None
		self._barcode_entry: ctk.CTkEntry | None = None

		self._show_login()

	def _run_in_background(self, call, on_done, on_error=None):
		if self._busy:
			return
		generation = self._screen_generation
		self._set_busy(True)

		def worker():
			try:
				result = call()
				error = None
			except Exception as exc:
				logger.exception("Background action failed")
				result = None
				error = exc

			def deliver():
				if generation != self._screen_generation:
					# The screen that asked for this is gone.
					return
				self._set_busy(False)
				if error is not None:
					if on_error is not None:
						on_error(error)
					else:
						self._show_message(f"{type(error).__name__}: {error}", is_error=True)
					return
				on_done(result)

			self.after(0, deliver)

		threading.Thread(target=worker, daemon=True).start()

	def _set_busy(self, busy: bool):
		self._busy = busy
		state = "disabled" if busy else "normal"
		for button in self._action_buttons:
			if button.winfo_exists():
				button.configure(state=state)
		if busy:
			self._start_request_progress()
		else:
			self._stop_request_progress()

	def _set_progress_idle(self):
		self._request_progress_label.configure(
			text=f"Tempo limite: {self._progress_total_seconds}s"
		)
		self._request_progress_bar.set(0)

	def _start_request_progress(self):
		self._cancel_progress_tick()
		self._progress_active = True
		self._progress_elapsed_seconds = 0.0
		self._request_progress_bar.set(0)
		self._tick_request_progress()

	def _tick_request_progress(self):
		self._progress_job = None
		if not self._progress_active:
			return

		self._progress_elapsed_seconds += self._progress_update_interval_seconds
		progress = min(1.0, self._progress_elapsed_seconds / self._progress_total_seconds)
		self._request_progress_bar.set(progress)
		self._request_progress_label.configure(
			text=(
				f"Aguardando servidor: {self._progress_elapsed_seconds:.1f}s / "
				f"{self._progress_total_seconds}s"
			)
		)
		self._progress_job = self.after(
			int(self._progress_update_interval_seconds * 1000),
			self._tick_request_progress,
		)

	def _stop_request_progress(self):
		self._progress_active = False
		self._cancel_progress_tick()
		self._set_progress_idle()

	def _cancel_progress_tick(self):
		if self._progress_job is not None:
			self.after_cancel(self._progress_job)
			self._progress_job = None

	def _clear_screen(self):
		self._screen_generation += 1
		self._cancel_refocus()
		if self._busy:
			self._busy = False
			self._stop_request_progress()
		self._action_buttons = []
		self._message_label = None
		self._barcode_entry = None
		for child in self._content.winfo_children():
			child.destroy()

	def _add_button(self, parent, text: str, command, **kwargs) -> ctk.CTkButton:
		button = ctk.CTkButton(parent, text=text, command=command, **kwargs)
		self._action_buttons.append(button)
		return button

	def _add_message_area(self):
		self._message_label = ctk.CTkLabel(self._content, text="", wraplength=440, justify="left")
		self._message_label.pack(anchor="w", padx=12, pady=8)

	def _show_message(self, text: str, is_error: bool = False):
		if self._message_label is None:
			return
		self._message_label.configure(
			text=text,
			text_color=ERROR_COLOR if is_error else SUCCESS_COLOR,
		)

	# Settings

	def _show_settings(self):
		self._clear_screen()
		settings = self._workflow.load_settings()

		ctk.CTkLabel(self._content, text="URL de Serviço").pack(anchor="w", padx=12, pady=(12, 2))
		url_entry = ctk.CTkEntry(self._content, placeholder_text="https://api.exemplo.com")
		url_entry.pack(fill="x", padx=12, pady=(0, 6))
		if settings.service_url:
			url_entry.insert(0, settings.service_url)

		ctk.CTkLabel(self._content, text="Cód. Empresa (TenantName)").pack(anchor="w", padx=12, pady=(6, 2))
		tenant_entry = ctk.CTkEntry(self._content, placeholder_text="Digite o código da empresa")
		tenant_entry.pack(fill="x", padx=12, pady=(0, 6))
		if settings.tenant_input:
			tenant_entry.insert(0, settings.tenant_input)

		status_label = ctk.CTkLabel(self._content, text="")
		status_label.pack(anchor="w", padx=12, pady=(6, 2))
		self._render_validation_status(status_label, "success" if settings.is_validated else "none")

		def save():
			url = url_entry.get()
			tenant = tenant_entry.get()

			def on_done(outcome):
				self._show_message(outcome.message, is_error=not outcome.ok)
				self._render_validation_status(status_label, "success" if outcome.ok else "error")

			self._run_in_background(lambda: self._workflow.save_settings(url, tenant), on_done)

		self._add_button(self._content, "VALIDAR E SALVAR", save).pack(anchor="w", padx=12, pady=8)
		self._add_button(self._content, "Voltar", self._show_login, fg_color="gray").pack(
			anchor="w", padx=12, pady=4
		)
		self._add_message_area()

	def _render_validation_status(self, label: ctk.CTkLabel, status: str):
		validated_at = self._workflow.validated_at
		last = validated_at.strftime("%d/%m/%Y %H:%M:%S") if validated_at else "Nunca validado"
		text = {
			"success": "Status: ✓ Validada",
			"error": "Status: X Falha na validação",
		}.get(status, "Status: X Não validada")
		label.configure(
			text=f"{text}\nÚltima validação: {last}",
			text_color=ERROR_COLOR if status != "success" else SUCCESS_COLOR,
		)

	# Login

	def _show_login(self):
		self._clear_screen()
		self._status_label.configure(text="Não conectado")

		ctk.CTkLabel(self._content, text="Código do Funcionário").pack(anchor="w", padx=12, pady=(12, 2))
		user_entry = ctk.CTkEntry(self._content, placeholder_text="Digite seu código")
		user_entry.pack(fill="x", padx=12, pady=(0, 6))

		ctk.CTkLabel(self._content, text="Senha").pack(anchor="w", padx=12, pady=(6, 2))
		password_entry = ctk.CTkEntry(self._content, placeholder_text="Digite sua senha", show="*")
		password_entry.pack(fill="x", padx=12, pady=(0, 6))

		def login():
			user_code = user_entry.get()
			password = password_entry.get()
			self._run_in_background(
				lambda: self._workflow.login(user_code, password),
				self._after_login,
			)

		self._add_button(self._content, "ENTRAR", login).pack(anchor="w", padx=12, pady=8)
		self._add_button(self._content, "Configurações", self._show_settings, fg_color="gray").pack(
			anchor="w", padx=12, pady=4
		)
		self._add_message_area()

	def _after_login(self, outcome: WorkflowOutcome):
		if not outcome.ok:
			self._show_message(outcome.message, is_error=True)
			return
		identity = self._workflow.identity
		self._status_label.configure(text=f"Usuário {identity.user_id} | Empresa: {identity.tenant_code}")
		self._route(outcome)

	def _route(self, outcome: WorkflowOutcome):
		if outcome.session is not None:
			self._show_execution(outcome.session)
		else:
			self._show_task_list(outcome.tasks, refresh=False)

	# Task list

	def _show_task_list(self, tasks: list[Task] | None = None, refresh: bool = True):
		self._clear_screen()

		header = ctk.CTkFrame(self._content)
		header.pack(fill="x", padx=12, pady=(12, 4))
		self._add_button(header, "Atualizar", self._refresh_tasks).pack(side="left", padx=4, pady=4)
		self._add_button(header, "Sair do Coletor", self._logout, fg_color=ERROR_COLOR).pack(
			side="right", padx=4, pady=4
		)

		self._task_list_frame = ctk.CTkScrollableFrame(self._content, height=460)
		self._task_list_frame.pack(fill="both", expand=True, padx=12, pady=4)
		self._add_message_area()

		self._render_tasks(tasks if tasks is not None else self._workflow.tasks)
		if refresh:
			self._refresh_tasks()

	def _refresh_tasks(self):
		def on_done(outcome: WorkflowOutcome):
			self._render_tasks(outcome.tasks)
			if not outcome.ok:
				self._show_message(outcome.message, is_error=True)

		self._run_in_background(self._workflow.refresh_tasks, on_done)

	def _render_tasks(self, tasks: list[Task]):
		for child in self._task_list_frame.winfo_children():
			child.destroy()

		if not tasks:
			ctk.CTkLabel(self._task_list_frame, text="Nenhuma tarefa disponível.").pack(
				anchor="w", padx=8, pady=8
			)
			return

		for task in tasks:
			status = task.status_label or task.status.value
			button = self._add_button(
				self._task_list_frame,
				f"#{task.id} {task.operation_name}\n{task.description}\n[{status}]",
				lambda selected=task: self._select_task(selected),
				anchor="w",
			)
			if not task.is_selectable:
				self._action_buttons.remove(button)
				button.configure(state="disabled")
			button.pack(fill="x", padx=4, pady=4)

	def _select_task(self, task: Task):
		def on_done(outcome: WorkflowOutcome):
			if outcome.ok:
				self._show_execution(outcome.session)
			else:
				self._show_message(outcome.message, is_error=True)

		self._run_in_background(lambda: self._workflow.select_task(task), on_done)

	def _logout(self):
		def on_done(outcome: WorkflowOutcome):
			self._show_login()
			if not outcome.ok and outcome.message:
				self._show_message(outcome.message, is_error=True)

		self._run_in_background(self._workflow.logout, on_done)

	# Task execution

	def _show_execution(self, session: TaskSession):
		self._clear_screen()
		self._session_labels: dict[str, ctk.CTkLabel] = {}

		for key in ("description", "instruction", "details"):
			label = ctk.CTkLabel(self._content, text="", wraplength=440, justify="left")
			label.pack(anchor="w", padx=12, pady=(8, 2))
			self._session_labels[key] = label

		self._barcode_entry = ctk.CTkEntry(self._content, placeholder_text="Leia o código de barras")
		self._barcode_entry.pack(fill="x", padx=12, pady=8)
		self._barcode_entry.bind("<Return>", lambda _event: self._submit_scan(session))

		self._add_message_area()

		footer = ctk.CTkFrame(self._content)
		footer.pack(fill="x", padx=12, pady=8)
		self._add_button(footer, "Pausar", lambda: self._pause(session)).pack(side="left", padx=4, pady=4)
		if session.can_finish():
			self._add_button(footer, "Encerrar", lambda: self._confirm(session, "finish")).pack(
				side="left", padx=4, pady=4
			)
			self._add_button(
				footer,
				"Cancelar",
				lambda: self._confirm(session, "cancel"),
				fg_color=ERROR_COLOR,
			).pack(side="left", padx=4, pady=4)
		if session.can_generate_new_box():
			self._add_button(footer, "Nova Caixa", lambda: self._new_box(session)).pack(
				side="left", padx=4, pady=4
			)
		self._add_button(footer, "Voltar", lambda: self._leave_execution(session), fg_color="gray").pack(
			side="right", padx=4, pady=4
		)

		self._render_session(session)
		self._schedule_refocus(500)

	def _render_session(self, session: TaskSession):
		task = session.task
		if task is None:
			return
		details = [
			("Próximo material", task.next_material_hint),
			("Qtd. restante", task.remaining_qty),
			("Origem", task.source_position),
			("Destino", task.dest_position),
			("Volumes lidos", task.volumes_read),
		]
		self._session_labels["description"].configure(
			text=f"{task.operation_name} #{task.id}\n{task.description}"
		)
		self._session_labels["instruction"].configure(text=f"Instrução: {task.instruction}")
		self._session_labels["details"].configure(
			text="\n".join(f"{name}: {value}" for name, value in details if value is not None)
		)
		if self._barcode_entry is not None:
			self._barcode_entry.delete(0, "end")
			self._barcode_entry.insert(0, session.barcode)

	def _submit_scan(self, session: TaskSession):
		if self._busy or not session.is_active:
			return
		session.set_barcode(self._barcode_entry.get())

		def on_done(outcome):
			if outcome is not None:
				self._show_message(outcome.message, is_error=not outcome.success)
			self._render_session(session)
			self._schedule_refocus(self._refocus_delay_ms)

		self._run_in_background(session.submit_scan, on_done)

	def _pause(self, session: TaskSession):
		self._run_in_background(session.pause, lambda result: self._after_action(session, result))

	def _confirm(self, session: TaskSession, action: str):
		if self._busy:
			return
		token = session.request_finish() if action == "finish" else session.request_cancel()
		if not messagebox.askyesno(token.title, token.prompt, parent=self):
			session.decline(token)
			return
		confirm = session.confirm_finish if action == "finish" else session.confirm_cancel
		self._run_in_background(lambda: confirm(token), lambda result: self._after_action(session, result))

	def _new_box(self, session: TaskSession):
		def on_done(result: ActionResult):
			self._show_message(result.message, is_error=not result.ok)
			self._render_session(session)
			self._schedule_refocus(self._refocus_delay_ms)

		self._run_in_background(session.new_box, on_done)

	def _after_action(self, session: TaskSession, result: ActionResult):
		if not result.exited:
			self._show_message(result.message, is_error=not result.ok)
			return
		if self._workflow.end_session(session):
			if result.exit_state is not SessionState.PAUSED:
				messagebox.showinfo("Sucesso", result.message, parent=self)
			self._show_task_list()

	def _leave_execution(self, session: TaskSession):
		if self._workflow.session is session:
			self._workflow.leave_session()
		self._show_task_list()

	def _schedule_refocus(self, delay_ms: int):
		self._cancel_refocus()
		self._refocus_job = self.after(delay_ms, self._focus_barcode)

	def _cancel_refocus(self):
		if self._refocus_job is not None:
			self.after_cancel(self._refocus_job)
			self._refocus_job = None

	def _focus_barcode(self):
		self._refocus_job = None
		if self._barcode_entry is not None and self._barcode_entry.winfo_exists():
			self._barcode_entry.focus_set()


def build_workflow(settings: AppSettings) -> ColetorWorkflow:
	store = SettingsStore(settings.settings_path)
	http_client = HttpClient(settings, store)
	service = ColetorService(
		tenant_api=TenantApi(http_client),
		session_api=SessionApi(http_client),
		task_api=TaskApi(http_client),
		request_timeout_seconds=settings.timeout_seconds,
	)
	return ColetorWorkflow(service, store)


def run_app() -> None:
	ctk.set_appearance_mode("System")
	ctk.set_default_color_theme("blue")

	try:
		settings = AppSettings.from_env()
	except ConfigurationError as exc:
		configure_logging()
		app = ctk.CTk()
		app.title("Coletor - Erro de Configuração")
		app.geometry("760x360")
		message = ctk.CTkTextbox(app)
		message.pack(fill="both", expand=True, padx=16, pady=16)
		message.insert(
			"1.0",
			"Erro de configuração. Corrija as variáveis de ambiente e reinicie:\n\n"
			f"{exc}\n",
		)
		app.mainloop()
		return

	configure_logging(settings.log_dir, console_level=settings.log_level)
	window = MainWindow(
		build_workflow(settings),
		refocus_delay_ms=settings.refocus_delay_ms,
	)
	window.mainloop()
