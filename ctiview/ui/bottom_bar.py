from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk

from ctiview.services.display_service import CHANNEL_MODES

ZOOM_SLIDER_MIN = 5
ZOOM_SLIDER_MAX = 800


class BottomBar(ctk.CTkFrame):
    def __init__(self, master: ctk.CTk, **kwargs) -> None:
        super().__init__(master, height=64, **kwargs)

        # callbacks
        self.on_zoom_change: Optional[Callable[[int], None]] = None
        self.on_zoom_fit: Optional[Callable[[], None]] = None
        self.on_zoom_actual: Optional[Callable[[], None]] = None
        self.on_zoom_step: Optional[Callable[[int], None]] = None
        self.on_channel_change: Optional[Callable[[str], None]] = None

        # layout
        self.grid_rowconfigure(0, weight=1)
        self.grid_columnconfigure(1, weight=1)  # slider stretches

        # Zoom controls
        self._zoom_label = ctk.CTkLabel(self, text="Масштаб")
        self._zoom_label.grid(row=0, column=0, padx=(10, 6), pady=8, sticky="w")

        self._zoom_value = ctk.StringVar(value="100%")
        self._zoom_slider = ctk.CTkSlider(
            self,
            from_=ZOOM_SLIDER_MIN,
            to=ZOOM_SLIDER_MAX,
            number_of_steps=ZOOM_SLIDER_MAX - ZOOM_SLIDER_MIN,
            command=self._on_slider_change,
        )
        self._zoom_slider.set(100)
        self._zoom_slider.grid(row=0, column=1, padx=6, pady=8, sticky="ew")
        self._zoom_value_label = ctk.CTkLabel(self, textvariable=self._zoom_value, width=56, anchor="w")
        self._zoom_value_label.grid(row=0, column=2, padx=(6, 12), pady=8, sticky="w")

        # Fit / 1:1 / step
        self._preset_buttons = ctk.CTkSegmentedButton(
            self,
            values=["Fit", "1:1", "−", "+"],
            command=self._on_preset_click,
        )
        self._preset_buttons.grid(row=0, column=3, padx=6, pady=8, sticky="w")

        # Channel
        self._channel_label = ctk.CTkLabel(self, text="Канал")
        self._channel_label.grid(row=0, column=4, padx=(12, 6), pady=8, sticky="w")
        self._channel_menu = ctk.CTkOptionMenu(self, values=list(CHANNEL_MODES), command=self._on_channel)
        self._channel_menu.set("RGBA")
        self._channel_menu.grid(row=0, column=5, padx=(0, 10), pady=8, sticky="w")

        self.set_controls_enabled(False)

    # public API (sync from controller)
    def set_zoom_percent(self, percent: int) -> None:
        # the slider range is narrower than the view limits; the label shows the real value
        self._zoom_slider.set(max(ZOOM_SLIDER_MIN, min(ZOOM_SLIDER_MAX, percent)))
        self._zoom_value.set(f"{percent}%")

    def set_channel_value(self, channel: str) -> None:
        self._channel_menu.set(channel)

    def set_controls_enabled(self, enabled: bool) -> None:
        state = "normal" if enabled else "disabled"
        self._zoom_slider.configure(state=state)
        self._preset_buttons.configure(state=state)
        self._channel_menu.configure(state=state)

    # events
    def _on_slider_change(self, value: float) -> None:
        percent = int(round(value))
        self._zoom_value.set(f"{percent}%")
        if self.on_zoom_change:
            self.on_zoom_change(percent)

    def _on_preset_click(self, value: str) -> None:
        # segmented button acts as a row of plain buttons
        self._preset_buttons.set("")
        if value == "Fit":
            if self.on_zoom_fit:
                self.on_zoom_fit()
        elif value == "1:1":
            if self.on_zoom_actual:
                self.on_zoom_actual()
        elif value in ("−", "+"):
            if self.on_zoom_step:
                self.on_zoom_step(1 if value == "+" else -1)

    def _on_channel(self, value: str) -> None:
        if self.on_channel_change:
            self.on_channel_change(value)
