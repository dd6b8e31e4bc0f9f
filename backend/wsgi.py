from hubdesk import create_app

app = create_app()
