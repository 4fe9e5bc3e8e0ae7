# morningpractice/qss.py
# Soft morning theme: pale blue to lavender, pill buttons, large clock

QSS = r"""
/* -------- Base -------- */
* {
  font-family: "Segoe UI", "Inter", system-ui, sans-serif;
  font-size: 11pt;
  color: #1F2937;
}
QWidget#PracticeWindow {
  background: qlineargradient(x1:0, y1:0, x2:0, y2:1,
    stop:0 #EFF6FF, stop:1 #F5F3FF);
}

/* -------- Header -------- */
QFrame#Header {
  background: qlineargradient(x1:0, y1:0, x2:1, y2:0,
    stop:0 #2563EB, stop:1 #9333EA);
  border-radius: 14px;
}
QLabel#AppTitle    { color: white; font-size: 20pt; font-weight: 700; }
QLabel#AppSubtitle { color: #DBEAFE; }

/* -------- Body -------- */
QLabel#Clock {
  color: #6D28D9;
  font-size: 30pt;
  font-weight: 700;
  border: 8px solid #C4B5FD;
  border-radius: 60px;
  min-width: 120px; min-height: 120px;
}
QLabel#Progress {
  background: #EDE9FE;
  color: #6D28D9;
  border-radius: 10px;
  padding: 2px 10px;
  font-weight: 600;
}
QLabel#StageTitle { font-size: 16pt; font-weight: 600; }
QLabel#Body       { color: #4B5563; }

/* -------- Buttons -------- */
QPushButton {
  border-radius: 18px;
  padding: 8px 22px;
  background: #E5E7EB;
}
QPushButton:hover    { background: #D1D5DB; }
QPushButton:disabled { color: #9CA3AF; background: #F3F4F6; }
QPushButton#Primary  { color: white; font-weight: 700; background: #7C3AED; }
QPushButton#Go       { color: white; font-weight: 700; background: #10B981; }
QPushButton#Mute     { background: rgba(255,255,255,0.25); color: white; }
"""
