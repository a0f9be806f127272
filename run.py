import os
from maritime_erp import create_app
from config import get_config, print_config_summary

# Create app instance with appropriate config
config = get_config()
app = create_app(config)

if __name__ == '__main__':
    # Print configuration summary
    print_config_summary()

    # Get port and host from environment or use defaults
    port = int(os.environ.get('PORT', 5000))
    host = os.environ.get('HOST', '0.0.0.0')

    print(f"Starting Maritime Services ERP on http://{host}:{port}")
    app.run(host=host, port=port, debug=app.config['DEBUG'])
