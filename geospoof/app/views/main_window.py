"""
MainWindowView
---------------
Tkinter main window for geospoof. This file contains **only View code**: no
location, simulation, or persistence logic. It exposes callback hooks that
``geospoof.app.main.App`` connects to the view models, and ``render_*``
methods the app calls when view-model state changes.

Layout:
  * Search row (entry searched on Return, clear button) with a results list underneath
  * Coordinate row standing in for a map tap (lat/lon entries + Select)
  * Status banner and primary Start/Stop button
  * Bookmarks list with actions
"""
from __future__ import annotations

import tkinter as tk
from tkinter import ttk
from typing import Callable, Optional, Sequence

OnVoid = Optional[Callable[[], None]]
OnText = Optional[Callable[[str], None]]
OnIndex = Optional[Callable[[int], None]]
OnLatLon = Optional[Callable[[str, str], None]]
OnMove = Optional[Callable[[int, int], None]]


class MainWindowView(tk.Tk):
    """Top-level application window (UI-only)."""

    def __init__(
        self,
        *,
        on_search_changed: OnText = None,
        on_search_submit: OnText = None,
        on_clear_search: OnVoid = None,
        on_pick_result: OnIndex = None,
        on_select_coordinate: OnLatLon = None,
        on_toggle_spoofing: OnVoid = None,
        on_center_real: OnVoid = None,
        on_add_bookmark: OnVoid = None,
        on_activate_bookmark: OnIndex = None,
        on_delete_bookmark: OnIndex = None,
        on_edit_bookmark: OnIndex = None,
        on_move_bookmark: OnMove = None,
        on_import_legacy: OnVoid = None,
    ) -> None:
        super().__init__()
        self.title("geospoof")
        self.geometry("520x640")
        self.minsize(420, 520)

        self._on_search_changed = on_search_changed
        self._on_search_submit = on_search_submit
        self._on_clear_search = on_clear_search
        self._on_pick_result = on_pick_result
        self._on_select_coordinate = on_select_coordinate
        self._on_delete_bookmark = on_delete_bookmark
        self._on_activate_bookmark = on_activate_bookmark
        self._on_edit_bookmark = on_edit_bookmark
        self._on_move_bookmark = on_move_bookmark

        self.columnconfigure(0, weight=1)
        self.rowconfigure(4, weight=1)

        self._build_search(row=0)
        self._build_coordinate_row(row=1)
        self._build_status(row=2, on_toggle=on_toggle_spoofing, on_center=on_center_real)
        self._build_bookmark_toolbar(row=3, on_add=on_add_bookmark, on_import=on_import_legacy)
        self._build_bookmarks(row=4)

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------
    def _build_search(self, row: int) -> None:
        frame = ttk.Frame(self)
        frame.grid(row=row, column=0, sticky="ew", padx=8, pady=(8, 4))
        frame.columnconfigure(0, weight=1)

        self.search_var = tk.StringVar()
        entry = ttk.Entry(frame, textvariable=self.search_var)
        entry.grid(row=0, column=0, sticky="ew")
        entry.bind("<KeyRelease>", lambda _e: self._emit_search_text())
        entry.bind("<Return>", lambda _e: self._emit_search_submit())
        ttk.Button(frame, text="✕", width=3, command=self._on_clear_search).grid(row=0, column=1, padx=(4, 0))
        self.searching_label = ttk.Label(frame, text="")
        self.searching_label.grid(row=0, column=2, padx=(4, 0))

        self.results = tk.Listbox(frame, height=5)
        self.results.bind("<<ListboxSelect>>", lambda _e: self._emit_pick_result())
        self._results_row = (frame, 1)

    def _build_coordinate_row(self, row: int) -> None:
        frame = ttk.Frame(self)
        frame.grid(row=row, column=0, sticky="ew", padx=8, pady=4)
        self.lat_var = tk.StringVar()
        self.lon_var = tk.StringVar()
        ttk.Label(frame, text="Lat").grid(row=0, column=0)
        ttk.Entry(frame, textvariable=self.lat_var, width=12).grid(row=0, column=1, padx=4)
        ttk.Label(frame, text="Lon").grid(row=0, column=2)
        ttk.Entry(frame, textvariable=self.lon_var, width=12).grid(row=0, column=3, padx=4)
        ttk.Button(frame, text="Select", command=self._emit_select_coordinate).grid(row=0, column=4, padx=4)
        self.center_label = ttk.Label(frame, text="")
        self.center_label.grid(row=1, column=0, columnspan=5, sticky="w", pady=(4, 0))

    def _build_status(self, row: int, *, on_toggle: OnVoid, on_center: OnVoid) -> None:
        frame = ttk.Frame(self)
        frame.grid(row=row, column=0, sticky="ew", padx=8, pady=4)
        frame.columnconfigure(0, weight=1)
        self.status_title = ttk.Label(frame, text="", font=("TkDefaultFont", 11, "bold"))
        self.status_title.grid(row=0, column=0, sticky="w")
        self.status_detail = ttk.Label(frame, text="")
        self.status_detail.grid(row=1, column=0, sticky="w")
        self.primary_button = ttk.Button(frame, text="", command=on_toggle)
        self.primary_button.grid(row=0, column=1, rowspan=2, padx=4)
        ttk.Button(frame, text="⌖", width=3, command=on_center).grid(row=0, column=2, rowspan=2)

    def _build_bookmark_toolbar(self, row: int, *, on_add: OnVoid, on_import: OnVoid) -> None:
        frame = ttk.Frame(self)
        frame.grid(row=row, column=0, sticky="ew", padx=8, pady=(8, 0))
        ttk.Button(frame, text="Add Bookmark", command=on_add).grid(row=0, column=0)
        ttk.Button(frame, text="Delete", command=self._emit_delete_bookmark).grid(row=0, column=1, padx=4)
        ttk.Button(frame, text="Rename", command=self._emit_edit_bookmark).grid(row=0, column=2)
        ttk.Button(frame, text="▲", width=3, command=lambda: self._emit_move_bookmark(-1)).grid(
            row=0, column=3, padx=(4, 0)
        )
        ttk.Button(frame, text="▼", width=3, command=lambda: self._emit_move_bookmark(1)).grid(row=0, column=4)
        self.import_button = ttk.Button(frame, text="Import Legacy", command=on_import)

    def _build_bookmarks(self, row: int) -> None:
        self.bookmarks = tk.Listbox(self, activestyle="none")
        self.bookmarks.grid(row=row, column=0, sticky="nsew", padx=8, pady=8)
        self.bookmarks.bind("<Double-Button-1>", lambda _e: self._emit_activate_bookmark())

    # ------------------------------------------------------------------
    # Render API (called by App)
    # ------------------------------------------------------------------
    def render_status(self, title: str, detail: str, button_title: str, button_disabled: bool) -> None:
        self.status_title.configure(text=title)
        self.status_detail.configure(text=detail)
        self.primary_button.configure(text=button_title, state="disabled" if button_disabled else "normal")

    def render_center(self, text: str) -> None:
        self.center_label.configure(text=text)

    def render_search(self, text: str, titles: Sequence[str], visible: bool, busy: bool) -> None:
        if self.search_var.get() != text:
            self.search_var.set(text)
        self.searching_label.configure(text="…" if busy else "")
        self.results.delete(0, tk.END)
        for title in titles:
            self.results.insert(tk.END, title)
        frame, grid_row = self._results_row
        if visible:
            self.results.grid(in_=frame, row=grid_row, column=0, columnspan=3, sticky="ew", pady=(4, 0))
        else:
            self.results.grid_remove()

    def render_bookmarks(self, rows: Sequence[str]) -> None:
        self.bookmarks.delete(0, tk.END)
        for row in rows:
            self.bookmarks.insert(tk.END, row)

    def render_import_prompt(self, visible: bool) -> None:
        if visible:
            self.import_button.grid(row=0, column=5, padx=4)
        else:
            self.import_button.grid_remove()

    # ------------------------------------------------------------------
    # Event helpers
    # ------------------------------------------------------------------
    def _emit_search_text(self) -> None:
        if self._on_search_changed:
            self._on_search_changed(self.search_var.get())

    def _emit_search_submit(self) -> None:
        if self._on_search_submit:
            self._on_search_submit(self.search_var.get())

    def _emit_pick_result(self) -> None:
        picked = self.results.curselection()
        if picked and self._on_pick_result:
            self._on_pick_result(int(picked[0]))

    def _emit_select_coordinate(self) -> None:
        if self._on_select_coordinate:
            self._on_select_coordinate(self.lat_var.get(), self.lon_var.get())

    def _emit_activate_bookmark(self) -> None:
        picked = self.bookmarks.curselection()
        if picked and self._on_activate_bookmark:
            self._on_activate_bookmark(int(picked[0]))

    def _emit_delete_bookmark(self) -> None:
        picked = self.bookmarks.curselection()
        if picked and self._on_delete_bookmark:
            self._on_delete_bookmark(int(picked[0]))

    def _emit_edit_bookmark(self) -> None:
        picked = self.bookmarks.curselection()
        if picked and self._on_edit_bookmark:
            self._on_edit_bookmark(int(picked[0]))

    def _emit_move_bookmark(self, delta: int) -> None:
        picked = self.bookmarks.curselection()
        if picked and self._on_move_bookmark:
            self._on_move_bookmark(int(picked[0]), delta)
